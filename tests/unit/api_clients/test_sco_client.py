"""Unit tests for ScoAPIClient compound mutations, deletion and listings."""

import asyncio

import pytest

from connect_client.api_clients.models import MeetingUpdateItem
from connect_client.api_clients.sco_client import ScoAPIClient
from connect_client.api_clients.status import StatusCode, StatusSubCode
from connect_client.config import ClientSettings

from tests.infrastructure.recording_transport import RecordingTransport, xml_reply

DETAIL_XML = (
    '<sco sco-id="1001" folder-id="100" type="meeting">'
    "<name>Weekly</name><url-path>/p1001/</url-path>"
    "<date-begin>2024-05-01T10:00:00.000-07:00</date-begin>"
    "<date-end>2024-05-01T11:00:00.000-07:00</date-end>"
    "</sco>"
)
# Name is required in a detail, so these fail to parse
DETAIL_WITHOUT_NAME = '<sco sco-id="1001" folder-id="100" type="meeting"><url-path>/p1001/</url-path></sco>'
DETAIL_WITHOUT_ID = '<sco folder-id="100" type="meeting"><url-path>/p1001/</url-path></sco>'


def _client(transport: RecordingTransport) -> ScoAPIClient:
    settings = ClientSettings(service_url="https://host/api/xml", username="a", password="b")
    return ScoAPIClient(settings, transport=transport)


def _new_meeting() -> MeetingUpdateItem:
    return MeetingUpdateItem(folder_id="100", type="meeting", name="Weekly")


class TestScoUpdate:
    """Test the create-or-update compound mutation."""

    @pytest.mark.asyncio
    async def test_create_returns_resolved_detail(self, recording_transport):
        recording_transport.script("sco-update", xml_reply("ok", body=DETAIL_XML))
        client = _client(recording_transport)

        result = await client.sco_update(_new_meeting())

        assert result.succeeded
        assert result.value.sco_id == "1001"
        assert result.value.name == "Weekly"
        assert result.value.full_url == "https://host/p1001/"
        assert recording_transport.calls_for("sco-update") == [
            "folder-id=100&type=meeting&name=Weekly"
        ]
        assert recording_transport.calls_for("sco-delete") == []

    @pytest.mark.asyncio
    async def test_update_without_detail_succeeds(self, recording_transport):
        recording_transport.script("sco-update", xml_reply("ok"))
        client = _client(recording_transport)

        result = await client.sco_update(
            MeetingUpdateItem(sco_id="1001", description="Moved to Friday")
        )

        assert result.succeeded
        assert result.value is None
        assert recording_transport.calls_for("sco-update") == [
            "sco-id=1001&description=Moved to Friday"
        ]

    @pytest.mark.asyncio
    async def test_server_rejection_returns_bare_outcome(self, recording_transport):
        recording_transport.script(
            "sco-update", xml_reply("no-access", subcode="denied", body=DETAIL_XML)
        )
        client = _client(recording_transport)

        result = await client.sco_update(_new_meeting())

        assert not result.succeeded
        assert result.code is StatusCode.NO_ACCESS
        assert result.sub_code is StatusSubCode.DENIED
        assert recording_transport.calls_for("sco-delete") == []

    @pytest.mark.asyncio
    async def test_unparseable_detail_is_rolled_back_once(self, recording_transport):
        recording_transport.script("sco-update", xml_reply("ok", body=DETAIL_WITHOUT_NAME))
        client = _client(recording_transport)

        result = await client.sco_update(_new_meeting())

        assert not result.succeeded
        assert result.value is None
        assert result.code is StatusCode.INVALID
        assert result.sub_code is StatusSubCode.FORMAT
        assert result.error is not None
        assert recording_transport.calls_for("sco-delete") == ["sco-id=1001"]

    @pytest.mark.asyncio
    async def test_rollback_is_skipped_without_identifier(self, recording_transport):
        recording_transport.script("sco-update", xml_reply("ok", body=DETAIL_WITHOUT_ID))
        client = _client(recording_transport)

        result = await client.sco_update(_new_meeting())

        assert not result.succeeded
        assert result.sub_code is StatusSubCode.FORMAT
        assert recording_transport.calls_for("sco-delete") == []

    @pytest.mark.asyncio
    async def test_failed_rollback_still_reports_format_failure(self, recording_transport):
        recording_transport.script("sco-update", xml_reply("ok", body=DETAIL_WITHOUT_NAME))
        recording_transport.script("sco-delete", xml_reply("no-access", subcode="denied"))
        client = _client(recording_transport)

        result = await client.sco_update(_new_meeting())

        assert result.code is StatusCode.INVALID
        assert result.sub_code is StatusSubCode.FORMAT
        assert len(recording_transport.calls_for("sco-delete")) == 1

    @pytest.mark.asyncio
    async def test_rollback_survives_caller_cancellation(self):
        started = asyncio.Event()
        finished = asyncio.Event()

        class SlowDeleteTransport(RecordingTransport):
            async def process_request(self, action, params, session_cookie=None):
                if action != "sco-delete":
                    return await super().process_request(action, params, session_cookie)
                started.set()
                await asyncio.sleep(0.05)
                reply = await super().process_request(action, params, session_cookie)
                finished.set()
                return reply

        transport = SlowDeleteTransport()
        transport.script("sco-update", xml_reply("ok", body=DETAIL_WITHOUT_NAME))
        client = _client(transport)

        task = asyncio.create_task(client.sco_update(_new_meeting()))
        await started.wait()
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        await asyncio.wait_for(finished.wait(), timeout=1.0)
        assert transport.calls_for("sco-delete") == ["sco-id=1001"]

    @pytest.mark.asyncio
    async def test_none_item_is_rejected(self, recording_transport):
        client = _client(recording_transport)

        with pytest.raises(ValueError):
            await client.sco_update(None)


class TestScoDelete:
    """Test the single-action removal of SCOs."""

    @pytest.mark.asyncio
    async def test_ids_are_repeated_parameters(self, recording_transport):
        client = _client(recording_transport)

        outcome = await client.sco_delete(["1", "2", "3"])

        assert outcome.ok
        assert recording_transport.calls_for("sco-delete") == [
            "sco-id=1&sco-id=2&sco-id=3"
        ]

    @pytest.mark.asyncio
    async def test_outcome_is_returned_verbatim(self, recording_transport):
        recording_transport.script("sco-delete", xml_reply("invalid", subcode="no-such-item"))
        client = _client(recording_transport)

        outcome = await client.sco_delete(["9"])

        assert outcome.code is StatusCode.INVALID
        assert outcome.sub_code is StatusSubCode.NO_SUCH_ITEM

    @pytest.mark.asyncio
    async def test_empty_id_list_is_rejected(self, recording_transport):
        client = _client(recording_transport)

        with pytest.raises(ValueError):
            await client.sco_delete([])
        assert recording_transport.calls == []


class TestListings:
    """Test lazy listings built on the post-processor."""

    @pytest.mark.asyncio
    async def test_report_my_meetings(self, recording_transport):
        body = (
            "<my-meetings>"
            '<meeting sco-id="1" type="meeting"><name>A</name><url-path>/a/</url-path>'
            "<date-begin>2024-05-01T10:00:00+00:00</date-begin>"
            "<date-end>2024-05-01T10:30:00+00:00</date-end>"
            "<duration>00:30:00.000</duration></meeting>"
            "</my-meetings>"
        )
        recording_transport.script("report-my-meetings", xml_reply("ok", body=body))
        client = _client(recording_transport)

        result = await client.report_my_meetings()
        items = list(result.value)

        assert result.succeeded
        assert [i.sco_id for i in items] == ["1"]
        assert items[0].duration.total_seconds() == 1800
        assert items[0].full_url == "https://host/a/"

    @pytest.mark.asyncio
    async def test_sco_contents_sends_folder_id(self, recording_transport):
        recording_transport.script("sco-contents", xml_reply("ok", body="<scos/>"))
        client = _client(recording_transport)

        result = await client.sco_contents("100")

        assert result.succeeded
        assert list(result.value) == []
        assert recording_transport.calls_for("sco-contents") == ["sco-id=100"]

    @pytest.mark.asyncio
    async def test_listing_failure(self, recording_transport):
        recording_transport.script(
            "report-my-meetings", xml_reply("no-access", subcode="no-login")
        )
        client = _client(recording_transport)

        result = await client.report_my_meetings()

        assert not result.succeeded
        assert result.value is None
        assert result.sub_code is StatusSubCode.NO_LOGIN
