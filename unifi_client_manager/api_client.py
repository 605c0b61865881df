import time

import requests
import urllib3

from typing import List, Dict, Any, Optional

from .models.client import UnifiClient
from .endpoints import (
    ACTION_REQUESTS,
    ALL_STATIONS,
    FALLBACK_STRATEGIES,
    SUCCESS_STATUS_CODES,
    VERIFY_PATH,
    ActionRequest,
    ListStrategy,
)
from .logging import get_logger, log_api_response, summarize_blocked
from .utils import dedupe_by_mac, is_recent_or_blocked, recent_cutoff
from .exceptions import (
    UnifiAuthenticationError,
    UnifiConfigurationError,
    UnifiOperationError,
    UnifiRetrievalError,
)

logger = get_logger(__name__)

SESSION_TIMEOUT = 3600


class UnifiController:
    """
    Client for listing, blocking and unblocking clients on a UniFi controller.

    Authenticates with a pre-shared API key sent as the ``X-API-KEY`` header.
    The key is re-verified lazily, before an operation, once the session is
    older than ``session_timeout``.

    Note:
        This client interacts with the UniFi Controller's **undocumented** private API.
        Endpoint availability and response shapes differ between controller versions,
        so listing and blocking each try several endpoints in a fixed order.
    """

    def __init__(
        self,
        controller_url,
        api_key,
        site="default",
        verify_ssl=False,
        session_timeout=SESSION_TIMEOUT,
        timeout=None,
    ):
        """
        Initialize the controller client. No request is made until the first operation.

        Args:
            controller_url: Base URL of the UniFi controller. A trailing slash is removed.
            api_key: API key generated on the controller.
            site: Site identifier. Defaults to "default".
            verify_ssl: Whether to verify SSL certificates. Defaults to False because
                        controllers usually serve self-signed certificates. Can also be
                        a path to a CA bundle.
            session_timeout: Seconds after which the API key is verified again.
                             Defaults to one hour.
            timeout: Optional per-request timeout in seconds. None leaves the
                     transport default (no timeout).

        Raises:
            UnifiConfigurationError: If the controller URL or API key is missing.
        """
        if not controller_url:
            raise UnifiConfigurationError("Controller URL must be provided")
        if not api_key:
            raise UnifiConfigurationError("API key must be provided")

        self.controller_url = controller_url.rstrip("/")
        self.site = site or "default"
        self.verify_ssl = verify_ssl
        self.session_timeout = session_timeout
        self.timeout = timeout

        self.is_authenticated = False
        self.last_authenticated = 0.0

        self.session = requests.Session()
        self.session.headers.update({
            "Content-Type": "application/json",
            "Accept": "application/json",
            "X-API-KEY": api_key,
        })

        logger.debug(
            f"Initializing UnifiController with URL: {self.controller_url}, site: {self.site}"
        )

        if not verify_ssl:
            logger.warning(
                "SSL certificate verification is disabled. The controller's certificate will not be checked."
            )
            urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def close(self):
        """Close the underlying HTTP session."""
        self.session.close()

    def _session_expired(self) -> bool:
        return time.time() - self.last_authenticated > self.session_timeout

    def _ensure_authenticated(self):
        if not self.is_authenticated or self._session_expired():
            self.authenticate()

    def authenticate(self):
        """
        Verify the API key with a lightweight call to the controller.

        Raises:
            UnifiAuthenticationError: If the controller cannot be reached or rejects the key.
        """
        uri = f"{self.controller_url}{VERIFY_PATH}"
        logger.debug(f"Verifying API key with controller via {uri}")
        try:
            response = self._invoke_api_call("GET", uri)
        except requests.exceptions.RequestException as e:
            self.is_authenticated = False
            error_msg = f"API key verification failed: {e}"
            logger.error(error_msg)
            raise UnifiAuthenticationError(error_msg) from e

        if not response.ok:
            self.is_authenticated = False
            error_msg = (
                f"Invalid API key or session expired (Status: {response.status_code})"
            )
            logger.error(error_msg)
            raise UnifiAuthenticationError(error_msg)

        self.is_authenticated = True
        self.last_authenticated = time.time()
        logger.info("Successfully verified API key with Unifi controller.")

    def _invoke_api_call(
        self,
        method: str,
        url: str,
        json_payload: Optional[Dict[str, Any]] = None,
    ) -> requests.Response:
        """
        Send a request with the session's headers, SSL and timeout settings.

        The response is returned whatever its status; callers decide what counts
        as success.

        Args:
            method: HTTP method (e.g., 'GET', 'POST').
            url: The full URL for the API endpoint.
            json_payload: Optional dictionary to send as JSON body.

        Returns:
            requests.Response: The response object from the requests library.

        Raises:
            requests.exceptions.RequestException: On transport failure.
        """
        request_kwargs = {
            "verify": self.verify_ssl,
            "timeout": self.timeout,
        }
        if json_payload is not None:
            request_kwargs["json"] = json_payload

        response = self.session.request(method, url, **request_kwargs)
        logger.debug(
            f"API {method} request to {url} returned status {response.status_code}")
        return response

    def _fetch_records(self, strategy: ListStrategy) -> List[Dict[str, Any]]:
        """
        Fetch raw client records from one listing endpoint.

        Raises:
            UnifiRetrievalError: If the request fails, the status is not 2xx, or
                                 the body does not have a recognized shape.
        """
        uri = strategy.url(self.controller_url, self.site)
        try:
            response = self._invoke_api_call("GET", uri)
        except requests.exceptions.RequestException as e:
            raise UnifiRetrievalError(f"GET {uri} failed: {e}") from e

        if not response.ok:
            raise UnifiRetrievalError(
                f"GET {uri} failed with status {response.status_code}")

        try:
            body = response.json()
        except ValueError as e:
            raise UnifiRetrievalError(f"GET {uri} returned invalid JSON: {e}") from e

        log_api_response(logger, uri, body, response.status_code)

        records = strategy.extract(body)
        if records is None:
            raise UnifiRetrievalError(
                f"Unexpected API response format for {uri}: {type(body).__name__}")
        return [record for record in records if isinstance(record, dict)]

    @staticmethod
    def _normalize(records: List[Dict[str, Any]], now: float) -> List[UnifiClient]:
        clients = []
        for record in records:
            if not record.get("mac"):
                logger.debug(f"Skipping client record without MAC: {record}")
                continue
            clients.append(UnifiClient.from_api(record, now=now))
        return clients

    def list_clients(self) -> List[UnifiClient]:
        """
        List recent and blocked clients of the configured site.

        First asks the ``stat/all_sta`` endpoint, which returns historical,
        connected and blocked clients in one call, and keeps those seen in the
        last 30 days plus every blocked one. If that endpoint fails, falls back
        to ``stat/sta``, ``list/user`` and ``stat/alluser``, pooling their
        records and merging duplicates by MAC so a blocked observation is
        never lost.

        Returns:
            List[UnifiClient]: Normalized clients.

        Raises:
            UnifiAuthenticationError: If the API key cannot be verified.
            UnifiRetrievalError: If the primary and every fallback endpoint fail.
        """
        self._ensure_authenticated()

        now = time.time()
        cutoff = recent_cutoff(now)
        logger.info(f"Fetching clients for site '{self.site}' last seen after {cutoff}")

        try:
            records = self._fetch_records(ALL_STATIONS)
        except UnifiRetrievalError as e:
            logger.warning(f"Failed to fetch from {ALL_STATIONS.name}: {e}")
            last_error = e
        else:
            recent = [r for r in records if is_recent_or_blocked(r, cutoff)]
            logger.info(
                f"Fetched {len(recent)} active/blocked clients from {ALL_STATIONS.name} "
                f"({len(records)} total)")
            logger.debug(f"Blocked clients in {ALL_STATIONS.name}: {summarize_blocked(recent)}")
            return self._normalize(recent, now)

        logger.info("Falling back to other client endpoints")
        pool: List[Dict[str, Any]] = []
        succeeded = False
        for strategy in FALLBACK_STRATEGIES:
            try:
                records = self._fetch_records(strategy)
            except UnifiRetrievalError as e:
                logger.warning(f"Failed to fetch from {strategy.name}: {e}")
                last_error = e
                continue

            succeeded = True
            logger.info(f"Found {len(records)} clients in {strategy.name}")
            blocked = summarize_blocked(records)
            if blocked:
                logger.debug(f"Blocked clients in {strategy.name}: {blocked}")
            pool.extend(records)

        if not succeeded:
            error_msg = f"Failed to fetch clients: {last_error}"
            logger.error(error_msg)
            raise UnifiRetrievalError(error_msg) from last_error

        unique = dedupe_by_mac(pool)
        logger.info(
            f"Final client counts from fallback: total={len(unique)}, "
            f"blocked={sum(1 for r in unique if r.get('blocked'))}")
        return self._normalize(unique, now)

    def _send_action(self, request: ActionRequest, mac: str, action: str) -> bool:
        uri = request.url(self.controller_url, self.site, mac, action)
        logger.debug(f"Trying {action} for {mac} via {request.method} {uri}")
        response = self._invoke_api_call(
            request.method, uri, json_payload=request.payload(mac, action))

        if response.status_code in SUCCESS_STATUS_CODES:
            logger.info(f"Successfully {action}ed client {mac} using endpoint: {uri}")
            return True
        if response.status_code >= 400:
            raise UnifiOperationError(
                f"{request.method} {uri} failed with status {response.status_code}")

        logger.warning(
            f"Unexpected status {response.status_code} from {uri} for {action} {mac}")
        return False

    def _set_block_state(self, mac: str, action: str):
        if not mac:
            raise UnifiOperationError(f"MAC address is required to {action} a client")

        self._ensure_authenticated()
        mac = mac.strip().lower()
        logger.info(f"Attempting to {action} client with MAC: {mac}")

        last_error: Optional[Exception] = None
        for request in ACTION_REQUESTS:
            try:
                if self._send_action(request, mac, action):
                    return
            except (requests.exceptions.RequestException, UnifiOperationError) as e:
                logger.warning(f"Failed to {action} {mac} using {request.path}: {e}")
                last_error = e

        if last_error is None:
            error_msg = f"{action.capitalize()} operation failed for client {mac}"
        else:
            error_msg = f"Failed to {action} client {mac}: {last_error}"
        logger.error(error_msg)
        raise UnifiOperationError(error_msg) from last_error

    def block_client(self, mac: str):
        """
        Block a client so it can no longer associate with the network.

        Tries the integration API's per-client ``block`` action, then the
        ``cmd/stamgr`` command under the UniFi OS proxy, then the legacy
        ``cmd/stamgr`` path. Stops at the first 200/204 response.

        Args:
            mac (str): Client MAC address. Sent lower-cased.

        Raises:
            UnifiAuthenticationError: If the API key cannot be verified.
            UnifiOperationError: If every endpoint candidate fails.
        """
        self._set_block_state(mac, "block")

    def unblock_client(self, mac: str):
        """
        Unblock a previously blocked client.

        Tries the same endpoint candidates as :meth:`block_client`, in the same order.

        Args:
            mac (str): Client MAC address. Sent lower-cased.

        Raises:
            UnifiAuthenticationError: If the API key cannot be verified.
            UnifiOperationError: If every endpoint candidate fails.
        """
        self._set_block_state(mac, "unblock")
