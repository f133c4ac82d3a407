"""API client for OpenStack Swift object storage."""

from __future__ import annotations

import logging
import mimetypes
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import Any, BinaryIO
from urllib.parse import quote, unquote

import httpx

from .exceptions import (
    AuthError,
    BackendError,
    BackendReadError,
    BackendWriteError,
    ObjectNotFoundError,
)
from .utils import DEFAULT_CHUNK_SIZE, DEFAULT_ENDPOINT

logger = logging.getLogger(__name__)

# Page size for container listings (Swift's default maximum)
LISTING_LIMIT = 10000

# Maximum number of names per bulk-delete request (Swift's default)
BULK_DELETE_LIMIT = 10000


@dataclass
class ObjectInfo:
    """Metadata of a stored object."""

    name: str
    """Object name"""

    hash: str
    """MD5 of the object's contents (ETag)"""

    content_type: str
    """Stored content type"""

    size: int = 0
    """Object size in bytes"""


class SwiftClient:
    """Client for interacting with an OpenStack Swift object store.

    A single instance may be shared by several threads once
    :meth:`authenticate` has completed.
    """

    def __init__(
        self,
        tenant: str,
        username: str,
        password: str,
        auth_url: str = DEFAULT_ENDPOINT,
        region: str | None = None,
        timeout: float = 60.0,
        transport: httpx.BaseTransport | None = None,
    ):
        """Initialize Swift client.

        Args:
            tenant: Tenant (project) name
            username: User name
            password: Password or API key
            auth_url: Keystone v2.0 endpoint, or a TempAuth endpoint containing /v1
            region: Optional region used to pick the object-store endpoint
            timeout: Request timeout in seconds (default: 60.0)
            transport: Optional httpx transport (used by tests)
        """
        self.tenant = tenant
        self.username = username
        self.password = password
        self.auth_url = auth_url.rstrip("/")
        self.region = region
        self.timeout = timeout
        self._transport = transport

        self.storage_url: str | None = None
        self.token: str | None = None
        self._client: httpx.Client | None = None

    def _get_client(self) -> httpx.Client:
        """Get or create the httpx client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.Client(
                timeout=httpx.Timeout(self.timeout),
                follow_redirects=True,
                transport=self._transport,
            )
        return self._client

    def close(self) -> None:
        """Close the client and release connections."""
        if self._client is not None and not self._client.is_closed:
            self._client.close()
            self._client = None

    def __enter__(self) -> SwiftClient:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    # =========================
    # Authentication
    # =========================

    @property
    def uses_tempauth(self) -> bool:
        """Whether the auth endpoint is a Swift TempAuth (v1) endpoint."""
        return "/v1" in httpx.URL(self.auth_url).path

    def authenticate(self) -> None:
        """Authenticate and discover the storage URL.

        Raises:
            AuthError: If the credentials are rejected or no object-store
                endpoint is available
        """
        try:
            if self.uses_tempauth:
                self._authenticate_v1()
            else:
                self._authenticate_v2()
        except httpx.RequestError as e:
            raise AuthError(f"Network error during authentication: {e}") from e

        logger.debug("Authenticated, storage URL: %s", self.storage_url)

    def _authenticate_v1(self) -> None:
        response = self._get_client().get(
            self.auth_url,
            headers={
                "X-Auth-User": f"{self.tenant}:{self.username}",
                "X-Auth-Key": self.password,
            },
        )
        if response.status_code >= 400:
            raise AuthError(
                f"Authentication failed with status {response.status_code}"
            )

        self.storage_url = response.headers.get("X-Storage-Url")
        self.token = response.headers.get("X-Auth-Token")
        if not self.storage_url or not self.token:
            raise AuthError("Authentication response is missing storage URL or token")

    def _authenticate_v2(self) -> None:
        payload = {
            "auth": {
                "tenantName": self.tenant,
                "passwordCredentials": {
                    "username": self.username,
                    "password": self.password,
                },
            }
        }
        response = self._get_client().post(f"{self.auth_url}/tokens", json=payload)
        if response.status_code >= 400:
            raise AuthError(
                f"Authentication failed with status {response.status_code}"
            )

        try:
            access = response.json()["access"]
            self.token = access["token"]["id"]
            catalog = access.get("serviceCatalog", [])
        except (ValueError, KeyError, TypeError) as e:
            raise AuthError("Invalid authentication response") from e

        self.storage_url = self._find_storage_url(catalog)

    def _find_storage_url(self, catalog: list[dict[str, Any]]) -> str:
        """Pick the object-store public URL from a Keystone service catalog."""
        for service in catalog:
            if service.get("type") != "object-store":
                continue
            for endpoint in service.get("endpoints", []):
                if self.region and endpoint.get("region") != self.region:
                    continue
                url = endpoint.get("publicURL")
                if url:
                    return str(url).rstrip("/")

        region_msg = f" in region '{self.region}'" if self.region else ""
        raise AuthError(f"No object-store endpoint found{region_msg}")

    # =========================
    # Requests
    # =========================

    def _url(self, container: str | None = None, name: str | None = None) -> str:
        if self.storage_url is None:
            raise AuthError("Client is not authenticated")
        url = self.storage_url
        if container is not None:
            url = f"{url}/{quote(container, safe='')}"
        if name is not None:
            url = f"{url}/{quote(name)}"
        return url

    def _handle_http_error(
        self, response: httpx.Response, error_cls: type[BackendError]
    ) -> BackendError | AuthError:
        """Map an HTTP error response to an exception.

        Args:
            response: Response with a 4xx/5xx status
            error_cls: Exception class for generic failures of this request

        Returns:
            Exception to raise
        """
        status_code = response.status_code

        if status_code == 401:
            return AuthError("Token rejected or unauthorized access")
        elif status_code == 404 and error_cls is BackendReadError:
            return ObjectNotFoundError("Resource not found")
        elif status_code == 422:
            return error_cls("Checksum mismatch (ETag did not match)", status_code)
        else:
            error_msg = f"Request failed with status {status_code}"
            detail = response.text.strip() if response.content else ""
            if detail:
                error_msg = f"{error_msg}: {detail[:200]}"
            return error_cls(error_msg, status_code)

    def _request(
        self,
        method: str,
        url: str,
        error_cls: type[BackendError],
        **kwargs: Any,
    ) -> httpx.Response:
        """Make an authenticated request.

        Args:
            method: HTTP method
            url: Absolute URL
            error_cls: Exception class raised on failure
                (BackendReadError or BackendWriteError)
            **kwargs: Additional arguments passed to httpx

        Returns:
            The successful response

        Raises:
            AuthError: On 401
            BackendReadError / BackendWriteError: On any other failure
        """
        headers = dict(kwargs.pop("headers", None) or {})
        headers["X-Auth-Token"] = self.token or ""

        try:
            response = self._get_client().request(method, url, headers=headers, **kwargs)
        except httpx.RequestError as e:
            raise error_cls(f"Network error: {e}") from e

        if response.status_code >= 400:
            raise self._handle_http_error(response, error_cls)
        return response

    # =========================
    # Container Operations
    # =========================

    def create_container(self, container: str) -> None:
        """Create a container (no-op if it already exists).

        Raises:
            BackendWriteError: If the container cannot be created
        """
        self._request("PUT", self._url(container), BackendWriteError)

    def update_container(self, container: str, headers: dict[str, str]) -> None:
        """Set container metadata/ACL headers.

        Raises:
            BackendWriteError: If the update is rejected
        """
        self._request("POST", self._url(container), BackendWriteError, headers=headers)

    def iter_object_names(
        self, container: str, limit: int = LISTING_LIMIT
    ) -> Iterator[list[str]]:
        """Iterate over the container listing page by page.

        Args:
            container: Container name
            limit: Page size

        Yields:
            Lists of object names

        Raises:
            BackendReadError: If a page cannot be fetched
        """
        marker = ""
        while True:
            response = self._request(
                "GET",
                self._url(container),
                BackendReadError,
                params={"format": "json", "limit": limit, "marker": marker},
            )
            if response.status_code == 204 or not response.content:
                return
            try:
                page = [item["name"] for item in response.json()]
            except (ValueError, KeyError, TypeError) as e:
                raise BackendReadError("Invalid container listing response") from e
            if not page:
                return
            yield page
            if page[-1] == marker:
                raise BackendReadError("Container listing did not advance")
            marker = page[-1]

    def list_object_names(self, container: str) -> set[str]:
        """Return the names of all objects in a container.

        Raises:
            BackendReadError: If the listing cannot be retrieved
        """
        names: set[str] = set()
        pages = 0
        for page in self.iter_object_names(container):
            names.update(page)
            pages += 1
        logger.debug("Listed %d object(s) in %d page(s)", len(names), pages)
        return names

    # =========================
    # Object Operations
    # =========================

    def head_object(self, container: str, name: str) -> ObjectInfo:
        """Fetch object metadata.

        Raises:
            ObjectNotFoundError: If the object does not exist
            BackendReadError: On other failures
        """
        response = self._request("HEAD", self._url(container, name), BackendReadError)
        headers = response.headers
        return ObjectInfo(
            name=name,
            hash=headers.get("Etag", "").strip('"').lower(),
            content_type=headers.get("Content-Type", ""),
            size=int(headers.get("Content-Length", 0) or 0),
        )

    def _detect_content_type(self, name: str) -> str:
        """Guess a content type from the object name."""
        content_type, _ = mimetypes.guess_type(name)
        return content_type or "application/octet-stream"

    def put_object(
        self,
        container: str,
        name: str,
        stream: BinaryIO,
        etag: str | None = None,
        content_type: str | None = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> str:
        """Upload an object from a binary stream.

        Args:
            container: Container name
            name: Object name
            stream: Open binary file-like object
            etag: Expected MD5; the server rejects the upload on mismatch
            content_type: Content type (guessed from name if omitted)
            chunk_size: Read size for streaming

        Returns:
            ETag reported by the server

        Raises:
            BackendWriteError: If the upload fails
        """

        def chunks() -> Iterable[bytes]:
            for chunk in iter(lambda: stream.read(chunk_size), b""):
                yield chunk

        headers = {"Content-Type": content_type or self._detect_content_type(name)}
        if etag:
            headers["ETag"] = etag

        response = self._request(
            "PUT",
            self._url(container, name),
            BackendWriteError,
            headers=headers,
            content=chunks(),
        )
        return response.headers.get("Etag", "").strip('"')

    def put_empty_object(self, container: str, name: str, content_type: str) -> None:
        """Create a zero-byte object with the given content type.

        Raises:
            BackendWriteError: If the object cannot be created
        """
        self._request(
            "PUT",
            self._url(container, name),
            BackendWriteError,
            headers={"Content-Type": content_type},
            content=b"",
        )

    @staticmethod
    def _bulk_error_name(container: str, path: Any) -> str:
        """Turn a bulk-delete error path (/container/name, quoted) into a name."""
        name = unquote(str(path))
        prefix = f"/{container}/"
        if name.startswith(prefix):
            name = name[len(prefix) :]
        return name

    def bulk_delete(self, container: str, names: Iterable[str]) -> int:
        """Delete objects with the bulk middleware.

        Names are sent in batches of at most BULK_DELETE_LIMIT.

        Args:
            container: Container name
            names: Object names to delete

        Returns:
            Number of objects deleted

        Raises:
            BackendWriteError: If any request or any object deletion fails.
                ``failed`` lists the names that were not deleted.
        """
        names = list(names)
        deleted = 0
        failed: list[str] = []

        for start in range(0, len(names), BULK_DELETE_LIMIT):
            batch = names[start : start + BULK_DELETE_LIMIT]
            body = "\n".join(quote(f"/{container}/{name}") for name in batch)
            try:
                response = self._request(
                    "POST",
                    self._url(),
                    BackendWriteError,
                    params={"bulk-delete": ""},
                    headers={"Content-Type": "text/plain", "Accept": "application/json"},
                    content=body.encode("utf-8"),
                )
                result = response.json()
            except (BackendWriteError, ValueError) as e:
                logger.debug("Bulk delete batch of %d failed: %s", len(batch), e)
                failed.extend(batch)
                continue

            deleted += int(result.get("Number Deleted", 0))
            errors = result.get("Errors") or []
            failed.extend(self._bulk_error_name(container, error[0]) for error in errors)
            status = str(result.get("Response Status", "200 OK"))
            if not status.startswith("2") and not errors:
                failed.extend(batch)

        if failed:
            raise BackendWriteError(
                f"Bulk delete failed for {len(failed)} object(s)", failed=failed
            )
        return deleted
