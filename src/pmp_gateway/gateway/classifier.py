"""Response classification for the PMP Gateway.

Turns a raw TransportResponse into exactly one Outcome variant. This is the only
layer that assigns meaning to a status code and body; the transport never
interprets responses and the workflow only chains stages.
"""

import logging
from http import HTTPStatus
from typing import List, Optional

import lxml.html
from lxml import etree

from pmp_gateway.models.outcomes import (
    BadRequest,
    CouldNotIdentifyUniquePatient,
    Failure,
    InternalServerError,
    NotFound,
    PatientOutcome,
    ReportOutcome,
    Success,
    Unauthorized,
)
from pmp_gateway.transport.http_client import TransportResponse

logger = logging.getLogger(__name__)

# Gateway filler text returned when no real details are available
BOILERPLATE_DETAILS_PREFIX = "Details of error can be"

ROLE_RESTRICTION_MARKER = "not allowed to make requests"
ROLE_RESTRICTION_NOTE = (
    " If this is unexpected, verify the provider role sent with the request."
)


def _secure_parser() -> etree.XMLParser:
    """XML parser with entity expansion, DTD loading and network access disabled."""
    return etree.XMLParser(
        resolve_entities=False,
        load_dtd=False,
        no_network=True,
        huge_tree=False,
    )


def parse_xml(content: str) -> etree._Element:
    """Parse a gateway XML body.
    
    Args:
        content: Response body text
        
    Returns:
        Root element of the parsed document
        
    Raises:
        etree.XMLSyntaxError: If the body is empty or not well-formed XML
    """
    if isinstance(content, bytes):
        data = content
    else:
        data = content.encode("utf-8")
    return etree.fromstring(data, _secure_parser())


def find_elements(element: etree._Element, local_name: str) -> List[etree._Element]:
    """Find element and descendants with the given local name, ignoring namespace.
    
    Args:
        element: Element to search from (included in the search)
        local_name: Element name without namespace
        
    Returns:
        Matching elements in document order
    """
    return element.xpath(
        "descendant-or-self::*[local-name() = $name]", name=local_name
    )


def find_element(element: etree._Element, local_name: str) -> Optional[etree._Element]:
    """Return the first element with the given local name, or None."""
    matches = find_elements(element, local_name)
    return matches[0] if matches else None


def element_value(element: Optional[etree._Element]) -> str:
    """Concatenated text content of an element, empty if the element is missing."""
    if element is None:
        return ""
    return "".join(element.itertext())


def format_error_message(message: str, details: str) -> str:
    """Format a gateway Message/Details pair.
    
    Details are appended as "{message} - {details}" unless blank or the
    gateway's boilerplate filler. A role restriction message gets a hint
    appended.
    
    Args:
        message: Message element text
        details: Details element text
        
    Returns:
        Formatted message
        
    Example:
        >>> format_error_message("Invalid DOB", "Birthdate must be YYYY-MM-DD")
        'Invalid DOB - Birthdate must be YYYY-MM-DD'
        >>> format_error_message("Invalid DOB", "Details of error can be found ...")
        'Invalid DOB'
    """
    error = message
    details = details.strip()
    if details and not details.startswith(BOILERPLATE_DETAILS_PREFIX):
        error += f" - {details}"
    if ROLE_RESTRICTION_MARKER in message:
        error += ROLE_RESTRICTION_NOTE
    return error


def error_message_from(node: etree._Element) -> str:
    """Format the Message/Details children of a Disallowed or Error node."""
    message = element_value(find_element(node, "Message"))
    details = element_value(find_element(node, "Details"))
    return format_error_message(message, details)


def _classify_non_ok(response: TransportResponse):
    """Shared dispatch for Unauthorized/NotFound/InternalServerError/unexpected."""
    if response.status_code == HTTPStatus.UNAUTHORIZED:
        return Unauthorized(response.text)
    if response.status_code == HTTPStatus.NOT_FOUND:
        return NotFound(response.text)
    if response.status_code == HTTPStatus.INTERNAL_SERVER_ERROR:
        return InternalServerError(response.text)

    logger.warning(f"Unexpected status {response.status_code} from PMP Gateway")
    return Failure(f"{response.reason} - {response.text}")


def classify_patient_response(response: TransportResponse) -> PatientOutcome:
    """Classify the patient stage response.
    
    A 200 response is Success unless it contains a Disallowed node. An
    embedded Error node is left for the caller: a patient response may mix
    reports and errors from different states.
    
    Args:
        response: Raw transport response
        
    Returns:
        One of Success, BadRequest, Unauthorized, NotFound,
        InternalServerError, CouldNotIdentifyUniquePatient, Failure
    """
    logger.debug(f"Classifying patient response: HTTP {response.status_code}")

    if response.status_code == HTTPStatus.OK:
        try:
            root = parse_xml(response.text)
        except (etree.XMLSyntaxError, ValueError) as e:
            logger.error(f"Failed to parse patient response XML: {e}")
            return Failure(f"Could not parse XML content from PMP Gateway - {e}")

        disallowed = find_element(root, "Disallowed")
        if disallowed is not None:
            message = error_message_from(disallowed)
            logger.info(f"Gateway could not identify a unique patient: {message}")
            return CouldNotIdentifyUniquePatient(message)

        return Success(root)

    if response.status_code == HTTPStatus.BAD_REQUEST:
        try:
            root = parse_xml(response.text)
        except (etree.XMLSyntaxError, ValueError) as e:
            logger.debug(f"BadRequest body is not XML, returning raw text: {e}")
            return BadRequest(response.text)

        error_node = find_element(root, "Error")
        if error_node is not None:
            return BadRequest(error_message_from(error_node))
        return BadRequest(response.text)

    return _classify_non_ok(response)


def classify_report_response(response: TransportResponse) -> ReportOutcome:
    """Classify the report stage response.
    
    A 200 body is the rendered HTML report.
    
    Args:
        response: Raw transport response
        
    Returns:
        One of Success, BadRequest, Unauthorized, NotFound,
        InternalServerError, Failure
    """
    logger.debug(f"Classifying report response: HTTP {response.status_code}")

    if response.status_code == HTTPStatus.OK:
        try:
            document = lxml.html.document_fromstring(response.text.encode("utf-8"))
        except (etree.ParserError, etree.XMLSyntaxError, ValueError) as e:
            logger.error(f"Failed to parse report HTML: {e}")
            return Failure(f"Could not parse HTML content from PMP Gateway - {e}")
        return Success(document)

    if response.status_code == HTTPStatus.BAD_REQUEST:
        return BadRequest(response.text)

    return _classify_non_ok(response)


def classify_exception(exception: Exception) -> Failure:
    """Convert a local transport or certificate exception into Failure.
    
    Args:
        exception: Exception raised while performing a stage
        
    Returns:
        Failure carrying the exception type and message
    """
    return Failure(f"{type(exception).__name__}: {exception}")
