"""
Transfer service for transferrer.

Runs the whole transfer workflow over a legacy registry snapshot:
reconcile every package, then for each package whose repository moved,
sign a change-of-location request and submit it to the registry.

The run is fail-fast. Skipped packages are logged and left alone, but any
error once transfers begin (a bad name, a signing failure, a rejected
submission) aborts the run.
"""

import logging
from functools import reduce
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from ..credentials import BOT_EMAIL, Credentials
from ..domain import (
    GitHubLocation,
    PackageLocations,
    SignedEnvelope,
    TransferPayload,
    location_url,
    normalize_package_name,
)
from ..exit_codes import UnsupportedOperationError
from ..infra import RegistryClient
from .. import signing
from .reconciler import LocationReconciler

logger = logging.getLogger(__name__)


class TransferService:
    """
    Orchestrates reconciliation, signing and submission.

    Example:
        service = TransferService(reconciler, registry, credentials)
        urls = service.run({"foo": "https://github.com/old-owner/foo"})
    """

    def __init__(
        self,
        reconciler: LocationReconciler,
        registry: RegistryClient,
        credentials: Credentials,
        legacy_prefixes: Iterable[str] = (),
        email: str = BOT_EMAIL,
        dry_run: bool = False,
    ):
        """
        Initialize TransferService.

        Args:
            reconciler: Decides which packages moved
            registry: Provides submit_transfer(envelope)
            credentials: Bot signing key pair
            legacy_prefixes: Ecosystem prefixes stripped from legacy names
            email: Identity recorded in each envelope
            dry_run: Sign requests but do not submit them
        """
        self.reconciler = reconciler
        self.registry = registry
        self.credentials = credentials
        self.legacy_prefixes = list(legacy_prefixes)
        self.email = email
        self.dry_run = dry_run

    def find_drifted(self, packages: Mapping[str, str]) -> List[Tuple[str, PackageLocations]]:
        """Reconcile every package, in input order, keeping those that moved."""
        drifted = []
        for name, location in packages.items():
            locations = self.reconciler.reconcile(name, location)
            if locations is not None:
                drifted.append((name, locations))
        return drifted

    def build_envelope(self, package_name: str, locations: PackageLocations) -> SignedEnvelope:
        """
        Build and sign the transfer request for one package.

        Raises:
            InvalidNameError: If the name fails the registry grammar
            UnsupportedOperationError: If the recorded location is not on GitHub
            SigningError: If the payload cannot be signed
        """
        name = normalize_package_name(package_name, self.legacy_prefixes)

        current = locations.metadata_location
        if not isinstance(current, GitHubLocation):
            raise UnsupportedOperationError(f"Cannot transfer {name} away from non-GitHub location {current}")

        new_location = GitHubLocation(
            owner=locations.tag_location.owner,
            repo=locations.tag_location.repo,
            subdir=current.subdir,
        )
        payload = TransferPayload(name=name, new_location=new_location)
        raw_payload = payload.to_json()
        signature = signing.sign(self.credentials.private_key, self.credentials.public_key, raw_payload)

        return SignedEnvelope(
            email=self.email,
            payload=payload,
            raw_payload=raw_payload,
            signature=signature,
        )

    def _transfer(self, urls: Dict[str, str], drift: Tuple[str, PackageLocations]) -> Dict[str, str]:
        package_name, locations = drift
        envelope = self.build_envelope(package_name, locations)

        if self.dry_run:
            logger.info(f"[DRY RUN] Would transfer {envelope.payload.name} to {envelope.payload.new_location}")
        else:
            self.registry.submit_transfer(envelope)

        return {**urls, package_name: location_url(envelope.payload.new_location)}

    def run(self, packages: Mapping[str, str]) -> Dict[str, str]:
        """
        Transfer every package whose repository moved.

        Args:
            packages: Legacy snapshot, package name -> repository URL

        Returns:
            The snapshot with each transferred package's URL replaced by its
            canonical new URL

        Raises:
            CommandError: Any fatal error; nothing after it is processed
        """
        logger.info(f"Reconciling {len(packages)} packages")
        drifted = self.find_drifted(packages)

        if not drifted:
            logger.info("No packages need to be transferred")
            return dict(packages)

        logger.info(f"{len(drifted)} packages have moved and will be transferred")
        urls = reduce(self._transfer, drifted, dict(packages))

        verb = "Prepared" if self.dry_run else "Transferred"
        logger.info(f"{verb} {len(drifted)} packages")
        return urls


def changed_entries(before: Mapping[str, str], after: Mapping[str, str]) -> Dict[str, Dict[str, Optional[str]]]:
    """Entries whose URL differs between two snapshots."""
    return {
        name: {'old': before.get(name), 'new': url}
        for name, url in after.items()
        if before.get(name) != url
    }
