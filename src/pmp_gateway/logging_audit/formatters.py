"""Custom log formatters for the PMP Gateway client.

This module provides specialized formatters for logging, including redaction of
protected health information (PHI) from gateway request/response logging.
"""

import logging
import re
from typing import List, Optional, Tuple

# Patient elements of the PatientRequest document whose text is PHI
PHI_XML_ELEMENTS = ("First", "Last", "Birthdate", "Street", "Phone", "ZipCode")


class PHIRedactingFormatter(logging.Formatter):
    """Formatter that redacts patient identifiers from log messages.
    
    Applies regex-based pattern matching to identify and redact dates of
    birth, phone numbers, DEA numbers, patient names, and the text of patient
    elements inside logged XML documents.
    
    Attributes:
        redact_pii: Whether to enable redaction
        patterns: List of (regex_pattern, replacement_text) tuples for redaction
        
    Example:
        >>> formatter = PHIRedactingFormatter(
        ...     fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        ...     redact_pii=True
        ... )
        >>> handler = logging.StreamHandler()
        >>> handler.setFormatter(formatter)
    """
    
    def __init__(
        self,
        fmt: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt: Optional[str] = None,
        redact_pii: bool = False,
    ) -> None:
        """Initialize the PHIRedactingFormatter.
        
        Args:
            fmt: Log message format string
            datefmt: Date format string (optional)
            redact_pii: Whether to enable redaction
        """
        super().__init__(fmt=fmt, datefmt=datefmt)
        self.redact_pii = redact_pii
        
        element_names = "|".join(PHI_XML_ELEMENTS)
        self.patterns: List[Tuple[re.Pattern[str], str]] = [
            # Patient XML elements, with or without a namespace prefix
            (re.compile(rf'<((?:\w+:)?(?:{element_names}))>[^<]*</\1>'),
             r'<\1>[REDACTED]</\1>'),
            
            # Date of birth: 1970-07-01
            (re.compile(r'\b(?:19|20)\d{2}-\d{2}-\d{2}\b'), '[DOB-REDACTED]'),
            
            # Phone: 614-555-1994 or 6145551994
            (re.compile(r'\b\d{3}-?\d{3}-?\d{4}\b'), '[PHONE-REDACTED]'),
            
            # DEA number: two letters followed by seven digits
            (re.compile(r'\b[A-Z]{2}\d{7}\b'), '[DEA-REDACTED]'),
            
            # Matches: "Patient: John Doe", "Name: Jane Smith"
            (re.compile(r'(Patient|Name):\s+([A-Z][a-z]+(?:\s+[A-Z][a-z]+)+)'), 
             r'\1: [NAME-REDACTED]'),
        ]
    
    def format(self, record: logging.LogRecord) -> str:
        """Format the log record with optional redaction.
        
        Args:
            record: Log record to format
            
        Returns:
            Formatted log message with PHI redacted if enabled
        """
        if self.redact_pii:
            # Redact the message only so the timestamp is left intact
            message = record.getMessage()
            for pattern, replacement in self.patterns:
                message = pattern.sub(replacement, message)
            record = logging.makeLogRecord(record.__dict__)
            record.msg = message
            record.args = None

        return super().format(record)
