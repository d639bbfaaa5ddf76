"""Property catalog: tokenization, lifecycle and metadata."""

import dataclasses
import logging

from fractional_ledger.base import LedgerComponent, require_amount, require_identity
from fractional_ledger.exceptions import StateError, ValidationError
from fractional_ledger.models import EventType, Property

logger = logging.getLogger(__name__)


class PropertyRegistry(LedgerComponent):
    """Creates properties and manages their lifecycle."""

    def tokenize_property(
        self,
        caller: str,
        address: str,
        total_value: int,
        total_shares: int,
        metadata_uri: str = "",
        owner: str | None = None,
    ) -> int:
        """Register a new property divided into ``total_shares`` shares.

        Parameters
        ----------
        caller : str
            Must be the registry administrator.
        address : str
            Physical address of the asset.
        total_value : int
            Valuation in the smallest currency unit.
        total_shares : int
            Number of shares the property is split into.
        metadata_uri : str
            Reference to off-ledger metadata.
        owner : str | None
            Asset owner receiving sale proceeds (default: the caller).

        Returns
        -------
        int
            The new property id.
        """
        self.gate.require_administrator(caller)
        require_amount("total_value", total_value, positive=True)
        require_amount("total_shares", total_shares, positive=True)
        if not isinstance(address, str) or not address.strip():
            raise ValidationError("Property address must not be empty")
        asset_owner = require_identity("owner", owner) if owner is not None else caller

        with self._atomic():
            property_id = self.store.next_property_id()
            prop = Property(
                property_id=property_id,
                address=address,
                total_value=total_value,
                total_shares=total_shares,
                available_shares=total_shares,
                price_per_share=total_value // total_shares,
                metadata_uri=metadata_uri,
                is_active=True,
                owner=asset_owner,
                created_at=self.clock(),
            )
            self.store.add_property(prop)
            self.events.emit(
                EventType.PROPERTY_TOKENIZED,
                property_id,
                property_id=property_id,
                address=address,
                total_value=total_value,
                total_shares=total_shares,
                price_per_share=prop.price_per_share,
                owner=asset_owner,
                metadata_uri=metadata_uri,
            )

        logger.info(
            "Tokenized property %d: %d shares at %d each (owner=%s)",
            property_id,
            total_shares,
            prop.price_per_share,
            asset_owner,
        )
        return property_id

    def deactivate_property(self, caller: str, property_id: int) -> None:
        """Stop sales of a property. Deactivating twice is allowed."""
        self.gate.require_administrator(caller)

        with self._atomic():
            prop = self.store.require_property(property_id)
            self.store.save_property(
                dataclasses.replace(prop, is_active=False, updated_at=self.clock())
            )
            self.events.emit(EventType.PROPERTY_DEACTIVATED, property_id, property_id=property_id)

        logger.info("Deactivated property %d", property_id)

    def withdraw_unsold_shares(self, caller: str, property_id: int) -> int:
        """Close out the unsold inventory of a deactivated property.

        The shares become permanently unissuable. No value is transferred.

        Returns
        -------
        int
            Number of shares withdrawn.
        """
        with self.settlement.lock():
            self.gate.require_administrator(caller)

            with self._atomic():
                prop = self.store.require_property(property_id)
                if prop.is_active:
                    raise StateError(f"Property {property_id} is still active")
                if prop.available_shares == 0:
                    raise StateError(f"Property {property_id} has no unsold shares")

                count = prop.available_shares
                self.store.save_property(
                    dataclasses.replace(
                        prop,
                        available_shares=0,
                        withdrawn_shares=prop.withdrawn_shares + count,
                        updated_at=self.clock(),
                    )
                )
                self.events.emit(
                    EventType.SHARES_WITHDRAWN,
                    property_id,
                    property_id=property_id,
                    admin=caller,
                    count=count,
                )

        logger.info("Withdrew %d unsold shares of property %d", count, property_id)
        return count

    def update_metadata_uri(self, caller: str, property_id: int, metadata_uri: str) -> None:
        """Replace the metadata reference of a property."""
        self.gate.require_administrator(caller)
        if not isinstance(metadata_uri, str):
            raise ValidationError("Metadata URI must be a string")

        with self._atomic():
            prop = self.store.require_property(property_id)
            self.store.save_property(
                dataclasses.replace(prop, metadata_uri=metadata_uri, updated_at=self.clock())
            )
            self.events.emit(
                EventType.METADATA_UPDATED,
                property_id,
                property_id=property_id,
                metadata_uri=metadata_uri,
            )

        logger.debug("Updated metadata of property %d", property_id)

    def get_property(self, property_id: int) -> Property:
        return self.store.require_property(property_id)

    def get_current_id(self) -> int:
        """Id of the most recently tokenized property (0 when none)."""
        return self.store.last_property_id

    def list_properties(self, active_only: bool = False) -> list[Property]:
        """All properties in id order."""
        props = sorted(self.store.properties.values(), key=lambda p: p.property_id)
        if active_only:
            return [p for p in props if p.is_active]
        return props
