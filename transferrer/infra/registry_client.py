"""
Registry API client infrastructure for transferrer.

Submits signed transfer envelopes to the registry's write API. The
registry checks the signature against ``rawPayload`` as received, so the
envelope is sent exactly as built, without re-serializing the payload.
"""

import logging
from typing import Optional, Dict, Any

import requests

from ..domain import SignedEnvelope
from ..exit_codes import SubmissionError

logger = logging.getLogger(__name__)

TRANSFER_ENDPOINT = "v1/transfer"


class RegistryClient:
    """
    Client for the registry write API.

    Example:
        client = RegistryClient("https://registry.example.org/api", token)
        client.submit_transfer(envelope)
    """

    def __init__(
        self,
        api_url: str,
        token: Optional[str] = None,
        timeout: int = 30,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize RegistryClient.

        Args:
            api_url: Base URL of the registry API
            token: Bot token sent as a bearer credential
            timeout: HTTP request timeout in seconds
            session: Optional requests session (for testing)
        """
        self.api_url = api_url.rstrip('/')
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            'Accept': 'application/json',
            'User-Agent': 'transferrer',
        })
        if token:
            self.session.headers['Authorization'] = f'Bearer {token}'

    def submit_transfer(self, envelope: SignedEnvelope) -> Dict[str, Any]:
        """
        Submit one transfer request.

        Returns:
            The registry's JSON response, or {} if it sent none

        Raises:
            SubmissionError: On transport failure or a non-2xx response
        """
        url = f"{self.api_url}/{TRANSFER_ENDPOINT}"
        name = envelope.payload.name

        try:
            response = self.session.post(url, json=envelope.to_dict(), timeout=self.timeout)
        except requests.RequestException as e:
            raise SubmissionError(f"Transfer of {name} could not be submitted: {e}") from e

        if not 200 <= response.status_code < 300:
            detail = response.text.strip()[:500]
            raise SubmissionError(
                f"Registry rejected transfer of {name} ({response.status_code}): {detail}",
                status_code=response.status_code,
            )

        logger.info(f"Submitted transfer of {name} to {envelope.payload.new_location}")
        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError:
            return {}
