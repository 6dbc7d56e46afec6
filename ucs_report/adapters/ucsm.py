"""UCS Manager XML API session.

This adapter speaks the UCS Manager XML API over HTTPS: every method is a
single XML document POSTed to ``/nuova``. It encapsulates transport concerns
(base URL, TLS verification, timeouts, retries with backoff, re-login on an
expired cookie) and returns records as plain attribute dictionaries with
PascalCase keys (``operState`` becomes ``OperState``), each carrying ``Dn``
and ``Rn``.

Notes
-----
- Only read methods are used: ``aaaLogin``, ``configResolveClass``,
  ``configResolveClasses`` and ``aaaLogout``.
- Statistics are pulled in one bulk ``configResolveClasses`` call over the
  counter classes the report consumes.
"""

from __future__ import annotations

import asyncio
import logging
import xml.etree.ElementTree as ET
from typing import Any, Dict, List, Optional, Sequence

import httpx

from ..domain.dn import RawRecord, rn_of
from ..utils.correlation import get_domain_id
from . import ManagementApiError, SessionFactory, register_session_type

logger = logging.getLogger(__name__)

API_PATH = "/nuova"

# Classes per configResolveClasses request
QUERY_BATCH_SIZE = 25

# Error codes that mean the session cookie is no longer valid
SESSION_EXPIRED_CODES = ("552",)

STATISTICS_CLASSES = (
    "etherRxStats",
    "etherTxStats",
    "fcStats",
    "equipmentChassisStats",
    "computeMbPowerStats",
    "computeMbTempStats",
    "swSystemStats",
)


def pascal_case(name: str) -> str:
    """``operState`` -> ``OperState``; already capitalized names are kept."""
    return name[:1].upper() + name[1:] if name else name


def element_to_record(element: ET.Element) -> RawRecord:
    """Convert one managed-object element to a record."""
    record: RawRecord = {pascal_case(k): v for k, v in element.attrib.items()}
    if not record.get("Rn"):
        record["Rn"] = rn_of(str(record.get("Dn") or ""))
    return record


def _out_configs(root: ET.Element) -> List[ET.Element]:
    out = root.find("outConfigs")
    return list(out) if out is not None else []


class UcsmXmlSession:
    """Session against one UCS Manager instance.

    Parameters
    ----------
    endpoint: str
        Base URL of UCS Manager (e.g., "https://ucsm.example.com").
    username: str
        XML API login name.
    password: str
        XML API password.
    timeout: int
        Request timeout in seconds for all HTTP operations.

    Attributes
    ----------
    _client: httpx.AsyncClient
        Shared async client configured with base URL, timeout and TLS policy.
    _cookie: Optional[str]
        Session cookie returned by ``aaaLogin``.
    """

    def __init__(
        self,
        endpoint: str,
        username: str,
        password: str,
        timeout: int = 60,
        *,
        verify_tls: bool = True,
        max_retries: int = 1,
        backoff_initial_ms: int = 200,
        backoff_multiplier: float = 2.0,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=endpoint,
            timeout=timeout,
            verify=verify_tls,
            headers={"Content-Type": "application/xml"},
        )
        self._endpoint = endpoint
        self._username = username
        self._password = password
        self._cookie: Optional[str] = None
        self._max_retries = max(0, int(max_retries))
        self._backoff_initial_ms = max(0, int(backoff_initial_ms))
        self._backoff_multiplier = max(1.0, float(backoff_multiplier))
        self._timeout_seconds = timeout
        logger.debug(
            "ucsm.session.init",
            extra={"endpoint": endpoint, "timeout_seconds": timeout},
        )

    def inject_http_client_for_testing(self, client: Any) -> None:
        """Replace underlying HTTP client (testing only).

        This allows unit tests to provide a mock compatible with ``post()``
        and ``aclose()``.
        """
        self._client = client

    @property
    def logged_in(self) -> bool:
        return self._cookie is not None

    def _delay(self, attempt: int) -> float:
        return (self._backoff_initial_ms / 1000.0) * (self._backoff_multiplier**attempt)

    async def _post_xml(self, body: ET.Element) -> ET.Element:
        """POST one XML API method and return the parsed response root.

        Raises
        ------
        httpx.HTTPError
            On transport errors or non-2xx responses, after retries.
        ValueError
            If the response body is not well-formed XML.
        """
        payload = ET.tostring(body, encoding="unicode")
        attempt = 0
        last_exc: Optional[Exception] = None
        while attempt <= self._max_retries:
            try:
                resp = await self._client.post(API_PATH, content=payload)
                resp.raise_for_status()
                break
            except httpx.TimeoutException as exc:
                last_exc = exc
                logger.warning(
                    "ucsm.http.timeout",
                    extra={
                        "domain_id": get_domain_id(),
                        "method": body.tag,
                        "attempt": attempt + 1,
                        "max_retries": self._max_retries,
                        "timeout_seconds": self._timeout_seconds,
                    },
                )
            except httpx.ConnectError as exc:
                last_exc = exc
            except httpx.HTTPStatusError as exc:
                last_exc = exc
                status = exc.response.status_code
                if status not in (429, 502, 503, 504) or attempt >= self._max_retries:
                    logger.error(
                        "ucsm.http.status_error",
                        extra={"method": body.tag, "status": status},
                    )
                    raise
            await asyncio.sleep(self._delay(attempt))
            attempt += 1
        else:
            if last_exc is not None:
                raise last_exc
            raise RuntimeError("UCS Manager request failed after retries without exception")

        try:
            root = ET.fromstring(resp.text)
        except ET.ParseError as exc:
            raise ValueError(f"Malformed XML API response to {body.tag}: {exc}") from exc
        if root.get("errorCode"):
            raise ManagementApiError(
                root.get("errorDescr") or root.get("invocationResult") or "request failed",
                code=root.get("errorCode"),
                method=body.tag,
            )
        return root

    async def _call(self, body: ET.Element) -> ET.Element:
        """Authenticated call; logs in again once when the cookie has expired."""
        if self._cookie is None:
            await self.login()
        body.set("cookie", self._cookie or "")
        try:
            return await self._post_xml(body)
        except ManagementApiError as exc:
            if exc.code not in SESSION_EXPIRED_CODES:
                raise
            logger.info("ucsm.session.relogin", extra={"endpoint": self._endpoint})
            self._cookie = None
            await self.login()
            body.set("cookie", self._cookie or "")
            return await self._post_xml(body)

    async def login(self) -> None:
        """Authenticate and keep the session cookie."""
        body = ET.Element(
            "aaaLogin", inName=self._username, inPassword=self._password
        )
        root = await self._post_xml(body)
        cookie = root.get("outCookie")
        if not cookie:
            raise ManagementApiError(
                "aaaLogin returned no session cookie", method="aaaLogin"
            )
        self._cookie = cookie
        logger.info(
            "ucsm.session.login",
            extra={"endpoint": self._endpoint, "version": root.get("outVersion")},
        )

    async def query_class(self, class_id: str) -> List[RawRecord]:
        body = ET.Element("configResolveClass", classId=class_id, inHierarchical="false")
        root = await self._call(body)
        return [element_to_record(e) for e in _out_configs(root) if e.tag == class_id]

    async def query_classes(
        self, class_ids: Sequence[str]
    ) -> Dict[str, List[RawRecord]]:
        """Resolve several classes, batching the request per ``QUERY_BATCH_SIZE``.

        Every requested class id is present in the result, possibly with an
        empty list.
        """
        found: Dict[str, List[RawRecord]] = {class_id: [] for class_id in class_ids}
        ids = list(found)
        for start in range(0, len(ids), QUERY_BATCH_SIZE):
            body = ET.Element("configResolveClasses", inHierarchical="false")
            in_ids = ET.SubElement(body, "inIds")
            for class_id in ids[start : start + QUERY_BATCH_SIZE]:
                ET.SubElement(in_ids, "Id", value=class_id)
            root = await self._call(body)
            for element in _out_configs(root):
                found.setdefault(element.tag, []).append(element_to_record(element))
        logger.debug(
            "ucsm.query_classes",
            extra={
                "classes": len(ids),
                "records": sum(len(v) for v in found.values()),
            },
        )
        return found

    async def query_statistics(self) -> List[RawRecord]:
        by_class = await self.query_classes(STATISTICS_CLASSES)
        return [record for records in by_class.values() for record in records]

    async def close(self) -> None:
        """Log out (best effort) and close the HTTP client."""
        try:
            if self._cookie is not None:
                await self._post_xml(ET.Element("aaaLogout", inCookie=self._cookie))
        except (httpx.HTTPError, ManagementApiError, ValueError) as exc:
            logger.warning(
                "ucsm.session.logout_failed",
                extra={"endpoint": self._endpoint, "error": str(exc)},
            )
        finally:
            self._cookie = None
            await self._client.aclose()


def session_factory(config: Any) -> SessionFactory:
    """Build a factory opening a logged-in session for a ``DomainConfig``."""

    async def _open() -> UcsmXmlSession:
        session = UcsmXmlSession(
            config.endpoint,
            config.username or "",
            config.password.get_secret_value() if config.password else "",
            config.timeout_seconds,
            verify_tls=config.verify_tls,
            max_retries=config.max_retries,
            backoff_initial_ms=config.backoff_initial_ms,
            backoff_multiplier=config.backoff_multiplier,
        )
        try:
            await session.login()
        except BaseException:
            await session.close()
            raise
        return session

    return _open


register_session_type(("ucsm-xml", "ucsm", "xml"), session_factory)
