"""DNS TXT lookups over DNS-over-HTTPS, and issuer identity record parsing.

Issuers publish one of two record kinds on the domain named in their
identity proof:

    openatts net=ethereum netId=1 addr=0x2f60375e8144e16Adf1979936301D8341D58C36C
    openatts a=dns-did; p=did:ethr:0xE712878f6E8d5d4F9e87E10DA604F9cB564C9a89#controller; v=1.0;
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

import httpx

from app.core import config

log = logging.getLogger(__name__)

# DNS RCODEs in the JSON API "Status" field
_NOERROR = 0
_NXDOMAIN = 3
_TXT = 16


class DnsLookupError(Exception):
    """TXT lookup failed (transport error or DNS error status)."""

    def __init__(self, message: str = "DNS lookup failed"):
        self.message = message
        super().__init__(message)


@dataclass(frozen=True)
class DnsTxtRecord:
    """``openatts net=... netId=... addr=...`` record."""
    net: str
    net_id: Optional[int]
    addr: str


@dataclass(frozen=True)
class DnsDidRecord:
    """``openatts a=dns-did; p=...; v=...;`` record."""
    algorithm: str
    public_key: str
    version: str


def parse_txt_record(record: str) -> Optional[DnsTxtRecord]:
    """Parse an address record; None if ``record`` is not one."""
    parts = record.strip().split()
    if not parts or parts[0] != config.OPENATTS_RECORD_PREFIX:
        return None

    fields = {}
    for part in parts[1:]:
        key, sep, value = part.partition("=")
        if sep:
            fields[key] = value

    if "addr" not in fields or "net" not in fields:
        return None
    try:
        net_id = int(fields["netId"]) if "netId" in fields else None
    except ValueError:
        return None
    return DnsTxtRecord(net=fields["net"], net_id=net_id, addr=fields["addr"])


def parse_did_record(record: str) -> Optional[DnsDidRecord]:
    """Parse a dns-did record; None if ``record`` is not one."""
    text = record.strip()
    if not text.startswith(config.OPENATTS_RECORD_PREFIX + " "):
        return None

    fields = {}
    for part in text[len(config.OPENATTS_RECORD_PREFIX):].split(";"):
        key, sep, value = part.strip().partition("=")
        if sep:
            fields[key] = value

    if fields.get("a") != "dns-did" or "p" not in fields or "v" not in fields:
        return None
    return DnsDidRecord(algorithm=fields["a"], public_key=fields["p"], version=fields["v"])


def _unquote(data: str) -> str:
    # Long TXT values arrive as several quoted chunks: "abc" "def"
    chunks = [chunk for chunk in data.split('"') if chunk.strip()]
    return "".join(chunks) if '"' in data else data


class DnsTxtResolver:
    """DNS TXT capability backed by a DNS-over-HTTPS JSON endpoint."""

    def __init__(self, url: str = config.DOH_URL, timeout: float = config.DOH_TIMEOUT_SECONDS):
        self.url = url
        self.timeout = timeout

    async def query(self, domain: str) -> List[str]:
        """Return the TXT strings published for ``domain``.

        NXDOMAIN yields an empty list.

        Raises:
            DnsLookupError: Transport failure or DNS error status.
        """
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(
                    self.url,
                    params={"name": domain, "type": "TXT"},
                    headers={"Accept": "application/dns-json"},
                )
                response.raise_for_status()
                body = response.json()
        except httpx.TimeoutException:
            raise DnsLookupError(f"DNS lookup timed out for {domain}")
        except httpx.HTTPError as e:
            raise DnsLookupError(f"DNS lookup failed for {domain}: {e}")
        except ValueError:
            raise DnsLookupError(f"DNS lookup returned invalid JSON for {domain}")

        status = body.get("Status", _NOERROR)
        if status == _NXDOMAIN:
            return []
        if status != _NOERROR:
            raise DnsLookupError(f"DNS lookup failed for {domain}: status {status}")

        records = [
            _unquote(answer.get("data", ""))
            for answer in body.get("Answer") or []
            if answer.get("type") == _TXT
        ]
        log.debug(f"dns_txt domain={domain} records={len(records)}")
        return records


_dns_resolver: Optional[DnsTxtResolver] = None


def get_dns_resolver() -> DnsTxtResolver:
    """Get or create the DNS TXT resolver singleton."""
    global _dns_resolver
    if _dns_resolver is None:
        _dns_resolver = DnsTxtResolver()
    return _dns_resolver
