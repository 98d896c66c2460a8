"""SCO API Client for the Connect XML API.

Creates, updates, deletes and lists SCOs ("shareable content objects": the
server's meetings, folders and content). ``sco_update`` is a compound
mutation: one round trip applies the change and returns a description of the
result. When that description cannot be parsed the newly created object is
deleted again, since the client cannot use it.
"""

import asyncio
import logging
from typing import Iterator, Optional, Sequence
from xml.etree.ElementTree import Element

from .base_client import ConnectAPIClient
from .marshalling import element_to_dict, from_element, to_query_string
from .models import MeetingDetail, MeetingItem, MeetingUpdateItem
from .results import produce_meeting_items
from .status import Outcome, StatusCode, TypedResult

logger = logging.getLogger(__name__)


class ScoAPIClient(ConnectAPIClient):
    """Client for SCO management operations."""

    async def sco_update(self, item: MeetingUpdateItem) -> TypedResult[MeetingDetail]:
        """Create a SCO or update the metadata of an existing one.

        Fields left as None are omitted from the request instead of being
        sent as empty ``name=`` parameters, so an update never blanks a
        field the caller did not set. Use ``to_query_string(item,
        include_nulls=True)`` with ``dispatch`` to send every field.

        Args:
            item: Mutation input; ``folder_id`` creates, ``sco_id`` updates

        Returns:
            TypedResult with the created SCO's detail. Updates return no
            detail node, which is a success with ``value=None``. An
            unparseable detail yields an ``invalid``/``format`` outcome after
            a best-effort deletion of the created SCO.

        Raises:
            ValueError: If item is None
        """
        if item is None:
            raise ValueError("Argument 'item' can not be None")

        outcome = await self.dispatch("sco-update", to_query_string(item))
        if outcome.code is not StatusCode.OK or outcome.result_document is None:
            return TypedResult.failure(outcome)

        # Updates of an existing SCO do not return a sco node
        detail_node = outcome.result_document.find(".//sco")
        if detail_node is None:
            return TypedResult.success(outcome, None)

        try:
            detail = from_element(MeetingDetail, detail_node)
            detail.full_url = self.resolve_full_url(detail.url_path)
        except (ValueError, TypeError) as e:
            logger.warning(f"Failed to parse sco-update detail: {e}")
            await self._rollback_created_sco(detail_node)
            return TypedResult.failure(outcome.as_format_failure(e))

        return TypedResult.success(outcome, detail)

    async def _rollback_created_sco(self, detail_node: Element) -> None:
        sco_id = element_to_dict(detail_node).get("sco-id")
        if not sco_id:
            logger.warning(
                "Cannot delete the SCO created by sco-update: no sco-id in reply"
            )
            return

        logger.info(f"Deleting SCO {sco_id} created by an unusable sco-update")
        # Shielded so a cancelled caller does not leave the SCO behind
        rollback = await asyncio.shield(self.sco_delete([sco_id]))
        if not rollback.ok:
            logger.error(f"Failed to delete SCO {sco_id}: {rollback.describe()}")

    async def sco_delete(self, sco_ids: Sequence[str]) -> Outcome:
        """Delete one or more SCOs in a single action.

        Deleting a folder deletes its contents.

        Args:
            sco_ids: Identifiers, sent as repeated ``sco-id`` parameters

        Returns:
            Outcome of the ``sco-delete`` action

        Raises:
            ValueError: If no identifier is given
        """
        if isinstance(sco_ids, str):
            sco_ids = [sco_ids]
        if not sco_ids:
            raise ValueError("At least one sco-id is required")

        params = "&".join(f"sco-id={sco_id}" for sco_id in sco_ids)
        return await self.dispatch("sco-delete", params)

    async def report_my_meetings(self) -> TypedResult[Iterator[MeetingItem]]:
        """List the meetings of the current user (``report-my-meetings``)."""
        outcome = await self.dispatch("report-my-meetings")
        return self._listing(outcome, "meeting")

    async def sco_contents(self, sco_id: str) -> TypedResult[Iterator[MeetingItem]]:
        """List the contents of a folder (``sco-contents``)."""
        if not sco_id:
            raise ValueError("sco_id can not be empty")

        outcome = await self.dispatch("sco-contents", f"sco-id={sco_id}")
        return self._listing(outcome, "sco")

    def _listing(
        self, outcome: Outcome, node_name: str
    ) -> TypedResult[Iterator[MeetingItem]]:
        document: Optional[Element] = outcome.result_document
        if outcome.code is not StatusCode.OK or document is None:
            return TypedResult.failure(outcome)

        items = produce_meeting_items(
            document.iterfind(f".//{node_name}"), self.settings.service_url
        )
        return TypedResult.success(outcome, items)
