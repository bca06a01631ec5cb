"""ADP pointer resolution.

Resolves a domain to the content pointer published in its `_adp.<domain>` TXT record.
The record is queried through a DNS-over-HTTPS JSON endpoint by default, or through the
system resolver. The record must carry an `adp:signer <URI>` marker whose URI names an
IPFS CID.
"""

import asyncio
import re
from typing import List
from urllib.parse import urlparse

from aiodns import DNSResolver
from aiodns.error import DNSError
from aiohttp import ClientError, ClientSession
import pycares.errno
import sentry_sdk

from webcivics.webcard.model.profile import ContentPointer
from webcivics.webcard.resolve.errors import ResolutionException

DEFAULT_DOH_ENDPOINT = "https://dns.google/resolve"
DEFAULT_IPFS_GATEWAY = "https://ipfs.io"

DNS_METHOD_DOH = "doh"
DNS_METHOD_NATIVE = "native"

TXT_RECORD_TYPE = 16

SIGNER_PATTERN = re.compile(r"adp:signer\s*<([^>]+)>")
CID_PATTERN = re.compile(r"ipfs/(Qm[a-zA-Z0-9]{44})")
HOSTNAME_PATTERN = re.compile(
    r"^(?=.{1,253}$)(?!-)[a-z0-9-]{1,63}(?<!-)(\.(?!-)[a-z0-9-]{1,63}(?<!-))*$"
)


def lookup_name(domain: str) -> str:
    return f"_adp.{domain}"


def parse_domain(value: str) -> str:
    """Normalize and validate a domain input.

    Strips whitespace, a leading http(s) scheme, any path and a trailing dot, and
    lower-cases the result.

    Raises:
        ResolutionException: InvalidDomain if the result is not a hostname
    """
    domain = value.strip().lower()
    domain = domain.removeprefix("https://").removeprefix("http://")
    domain = domain.split("/", 1)[0].rstrip(".")
    if HOSTNAME_PATTERN.match(domain) is None:
        raise ResolutionException.invalid_domain(value)
    return domain


async def query_txt_doh(
    session: ClientSession, doh_endpoint: str, domain: str
) -> List[str]:
    """Query TXT records for `_adp.{domain}` through a DNS-over-HTTPS JSON endpoint.

    Args:
        session: HTTP client session
        doh_endpoint: Resolver URL accepting `name` and `type` query parameters
        domain: Validated domain

    Returns:
        The `data` strings of the TXT answers, possibly empty

    Raises:
        ResolutionException: DnsFailure if the query fails or reports a non-zero status
    """
    params = {"name": lookup_name(domain), "type": "TXT"}
    try:
        async with session.get(
            doh_endpoint, params=params, headers={"Accept": "application/dns-json"}
        ) as resp:
            if resp.status != 200:
                raise ResolutionException.dns_failure(
                    f"resolver returned HTTP {resp.status}"
                )
            body = await resp.json(content_type=None)
    except (ClientError, asyncio.TimeoutError, ValueError) as e:
        sentry_sdk.capture_exception(e)
        raise ResolutionException.dns_failure(str(e) or type(e).__name__) from e

    if not isinstance(body, dict):
        raise ResolutionException.dns_failure("malformed resolver response")

    status = body.get("Status")
    if status != 0:
        raise ResolutionException.dns_failure(f"resolver status {status}")

    return [
        str(answer.get("data", ""))
        for answer in body.get("Answer") or []
        if isinstance(answer, dict) and answer.get("type") == TXT_RECORD_TYPE
    ]


async def query_txt_native(domain: str) -> List[str]:
    """Query TXT records for `_adp.{domain}` through the system resolver.

    A missing name or a name without TXT data yields an empty list, matching a
    successful DNS-over-HTTPS response without answers.

    Raises:
        ResolutionException: DnsFailure for any other resolver error
    """
    resolver = DNSResolver()
    try:
        results = await resolver.query(lookup_name(domain), "TXT")
    except DNSError as e:
        code = e.args[0] if e.args else None
        if code in (pycares.errno.ARES_ENODATA, pycares.errno.ARES_ENOTFOUND):
            return []
        sentry_sdk.capture_exception(e)
        raise ResolutionException.dns_failure(str(e)) from e

    texts = []
    for result in results or []:
        text = result.text
        if isinstance(text, bytes):
            text = text.decode("utf-8", errors="replace")
        texts.append(text)
    return texts


def select_record(records: List[str], domain: str) -> str:
    """Pick the TXT record to read the pointer from.

    Quotes are removed first, which also joins multi-string records. The first record
    carrying the signer marker wins, otherwise the first record is returned.

    Raises:
        ResolutionException: RecordMissing if there are no records
    """
    cleaned = [record.replace('"', "") for record in records]
    if len(cleaned) == 0:
        raise ResolutionException.record_missing(lookup_name(domain))
    return next(
        (record for record in cleaned if SIGNER_PATTERN.search(record)), cleaned[0]
    )


def extract_pointer(txt: str, gateway: str = DEFAULT_IPFS_GATEWAY) -> ContentPointer:
    """Extract the content pointer from a TXT record payload.

    The document is always fetched from `gateway`, whatever host the signer URI names.

    Raises:
        ResolutionException: PointerNotFound if there is no `adp:signer <URI>` marker,
            PointerUnrecognized if the URI path does not contain an `ipfs/Qm...` CID
    """
    signer = SIGNER_PATTERN.search(txt)
    if signer is None:
        raise ResolutionException.pointer_not_found()
    signer_uri = signer.group(1).strip()

    cid = CID_PATTERN.search(urlparse(signer_uri).path)
    if cid is None:
        raise ResolutionException.pointer_unrecognized(signer_uri)

    return ContentPointer(
        cid=cid.group(1),
        signer_uri=signer_uri,
        resolved_uri="{gateway}/ipfs/{cid}".format(
            gateway=gateway.rstrip("/"), cid=cid.group(1)
        ),
    )


async def resolve_pointer(
    session: ClientSession,
    domain: str,
    dns_method: str = DNS_METHOD_DOH,
    doh_endpoint: str = DEFAULT_DOH_ENDPOINT,
    gateway: str = DEFAULT_IPFS_GATEWAY,
) -> ContentPointer:
    """Resolve a validated domain to its ADP content pointer.

    No retries happen here; a failed lookup fails the whole run.
    """
    if dns_method == DNS_METHOD_NATIVE:
        records = await query_txt_native(domain)
    else:
        records = await query_txt_doh(session, doh_endpoint, domain)
    return extract_pointer(select_record(records, domain), gateway)
