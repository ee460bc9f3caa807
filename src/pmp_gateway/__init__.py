"""PMP Gateway client.

Client for the Appriss PMP Gateway: patient lookup, report retrieval, and
classification of every response into a closed set of outcomes.
"""

__version__ = "0.1.0"
