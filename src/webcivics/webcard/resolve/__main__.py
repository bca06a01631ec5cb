from typing import List
import argparse
import aiohttp
import asyncio
import json
import logging

logger = logging.getLogger(__name__)

from webcivics.webcard.model.outcome import OutcomeStatus
from webcivics.webcard.model.services import load_service_table
from webcivics.webcard.resolve.pipeline import ProfileOrchestrator, ResolverOptions
from webcivics.webcard.resolve.pointer import (
    DEFAULT_DOH_ENDPOINT,
    DEFAULT_IPFS_GATEWAY,
    DNS_METHOD_DOH,
    DNS_METHOD_NATIVE,
)
from webcivics.webcard.resolve.render import render_field, render_payment_address


async def realMain() -> None:
    parser = argparse.ArgumentParser(
        prog="webcard-resolve", description="Resolve ADP WebCard profiles"
    )
    parser.add_argument("domain", nargs="+", help="The domain(s) to resolve.")
    parser.add_argument(
        "--field", help="Print only this field, for example foaf:name."
    )
    parser.add_argument(
        "--format",
        default="json",
        choices=["json", "turtle"],
        help="Output format for --field.",
    )
    parser.add_argument(
        "--ecash", action="store_true", help="Print only the eCash payment address."
    )
    parser.add_argument(
        "--dns-method",
        default=DNS_METHOD_DOH,
        choices=[DNS_METHOD_DOH, DNS_METHOD_NATIVE],
        help="How to look up the _adp TXT record.",
    )
    parser.add_argument(
        "--doh-endpoint",
        default=DEFAULT_DOH_ENDPOINT,
        help="The DNS-over-HTTPS JSON endpoint to query.",
    )
    parser.add_argument(
        "--gateway",
        default=DEFAULT_IPFS_GATEWAY,
        help="The IPFS gateway to fetch documents from.",
    )
    parser.add_argument(
        "--services-file", help="JSON file with the service descriptor table."
    )

    args = parser.parse_args()

    domains: List[str] = args.domain
    options = ResolverOptions(
        dns_method=args.dns_method,
        doh_endpoint=args.doh_endpoint,
        ipfs_gateway=args.gateway,
        services=tuple(load_service_table(args.services_file)),
    )

    async with aiohttp.ClientSession() as session:
        orchestrator = ProfileOrchestrator(session, options)
        for domain in domains:
            orchestrator.request(domain, requested_field=args.field)
            outcome = await orchestrator.wait()

            if outcome.status != OutcomeStatus.found or outcome.profile is None:
                logger.error("Could not resolve %s: %s", domain, outcome.message)
                print(json.dumps(outcome.model_dump(mode="json")))
                continue

            if args.field:
                print(
                    render_field(args.field, outcome.profile.requested_field, args.format)
                )
            elif args.ecash:
                print(render_payment_address(outcome.profile))
            else:
                print(json.dumps(outcome.model_dump(mode="json"), indent=2))


def main() -> None:
    logging.basicConfig()
    asyncio.run(realMain())


if __name__ == "__main__":
    main()
