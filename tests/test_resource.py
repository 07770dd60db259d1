"""
Resource tests: serialization, identity, change notification and the
save / destroy requests.
"""

import logging
from datetime import datetime
from typing import Optional

import httpx
import pytest

from starrest import Resource, ResourceConfig, ResourceValidationError

from conftest import Contact


class ValidatedContact(Contact):

    def validate_resource(self):
        if not self.first_name:
            return "first_name is required"
        return None


class TestIdentity:

    def test_new_without_id(self):
        assert Contact(first_name="Joe").is_new()

    def test_not_new_with_id(self):
        assert not Contact(id=1).is_new()

    def test_url_for_new_resource(self):
        assert Contact()._url() == "/contacts"

    def test_url_for_existing_resource(self):
        assert Contact(id=4)._url() == "/contacts/4"

    def test_url_without_configuration(self):
        class Anonymous(Resource):
            pass

        assert Anonymous(id=1)._url() is None

    def test_configuration_accessors(self):
        contact = Contact()

        assert contact.resource_id_field == "id"
        assert contact.resource_url == "/contacts"
        assert contact.resource_name == "contact"
        assert contact.resource_properties == ["first_name", "last_name"]

    def test_configuration_is_inherited(self):
        class Colleague(Contact):
            model_config = ResourceConfig(url="/colleagues")

        colleague = Colleague(id=2)
        assert colleague._url() == "/colleagues/2"
        assert colleague.resource_name == "contact"


class TestSerialization:

    def test_serialize_nests_under_resource_name(self):
        contact = Contact(id=1, first_name="Joe", last_name="Blow", nickname="JB")

        assert contact.serialize() == {"contact": {"first_name": "Joe", "last_name": "Blow"}}

    def test_serialize_property_override(self):
        class ShoutingContact(Contact):
            def serialize_property(self, prop):
                value = super().serialize_property(prop)
                return value.upper() if isinstance(value, str) else value

        contact = ShoutingContact(first_name="Joe")
        assert contact.serialize() == {"contact": {"first_name": "JOE", "last_name": None}}

    def test_deserialize_reads_flat_fields(self):
        contact = Contact().deserialize({"id": 1, "first_name": "Joe", "email": "joe@example.com"})

        assert contact.id == 1
        assert contact.first_name == "Joe"
        assert contact.email == "joe@example.com"

    def test_wire_format_is_asymmetric(self):
        # serialize() wraps in resource_name, deserialize() does not unwrap it
        original = Contact(first_name="Joe", last_name="Blow")
        echoed = Contact().deserialize(original.serialize())

        assert echoed.first_name is None
        assert echoed.contact == {"first_name": "Joe", "last_name": "Blow"}

    def test_deserialize_property_override(self):
        class TrimmingContact(Contact):
            def deserialize_property(self, prop, value):
                if isinstance(value, str):
                    value = value.strip()
                super().deserialize_property(prop, value)

        contact = TrimmingContact().deserialize({"first_name": "  Joe "})
        assert contact.first_name == "Joe"


class TestCopying:

    def test_duplicate_properties(self):
        source = Contact(id=1, first_name="Joe", last_name="Blow")
        target = Contact()

        target.duplicate_properties(source)

        assert target.first_name == "Joe"
        assert target.last_name == "Blow"
        assert target.is_new()

    def test_duplicate_selected_properties(self):
        source = Contact(first_name="Joe", last_name="Blow")
        target = Contact()

        target.duplicate_properties(source, ["last_name"])

        assert target.first_name is None
        assert target.last_name == "Blow"

    def test_copy_resource_keeps_identity(self):
        source = Contact(id=7, first_name="Joe", last_name="Blow")

        duplicate = source.copy_resource()

        assert duplicate is not source
        assert isinstance(duplicate, Contact)
        assert duplicate.id == 7
        assert duplicate.first_name == "Joe"


class TestChangeNotification:

    def test_assignment_notifies(self):
        contact = Contact(first_name="Joe")
        events = []
        contact.subscribe(events.append)

        contact.first_name = "Joseph"

        assert len(events) == 1
        assert events[0].source is contact
        assert events[0].changes == {"first_name": "Joseph"}
        assert events[0].previous == {"first_name": "Joe"}

    def test_unchanged_assignment_is_silent(self):
        contact = Contact(first_name="Joe")
        events = []
        contact.subscribe(events.append)

        contact.first_name = "Joe"

        assert events == []

    def test_deserialize_is_one_batch(self):
        contact = Contact()
        events = []
        seen_during_notification = []

        def handler(event):
            events.append(event)
            seen_during_notification.append((contact.first_name, contact.last_name))

        contact.subscribe(handler)
        contact.deserialize({"id": 1, "first_name": "Joe", "last_name": "Blow"})

        assert len(events) == 1
        assert events[0].changes == {"id": 1, "first_name": "Joe", "last_name": "Blow"}
        assert seen_during_notification == [("Joe", "Blow")]

    def test_nested_batches_flush_once(self):
        contact = Contact()
        events = []
        contact.subscribe(events.append)

        contact.begin_property_changes()
        contact.first_name = "Joe"
        with contact.property_changes():
            contact.last_name = "Blow"
        assert events == []
        contact.end_property_changes()

        assert len(events) == 1
        assert events[0].fields == ["first_name", "last_name"]

    def test_batch_reverting_value_is_silent(self):
        contact = Contact(first_name="Joe")
        events = []
        contact.subscribe(events.append)

        with contact.property_changes():
            contact.first_name = "Jim"
            contact.first_name = "Joe"

        assert events == []

    def test_unbalanced_end_raises(self):
        with pytest.raises(RuntimeError):
            Contact().end_property_changes()

    def test_failing_handler_does_not_block_others(self, caplog):
        caplog.set_level(logging.ERROR, logger="starrest")
        contact = Contact()
        events = []

        def broken(event):
            raise RuntimeError("handler bug")

        contact.subscribe(broken)
        contact.subscribe(events.append)
        contact.first_name = "Joe"

        assert len(events) == 1
        assert "handler bug" in caplog.text

    def test_unsubscribe(self):
        contact = Contact()
        events = []
        contact.subscribe(events.append)
        contact.unsubscribe(events.append)

        contact.first_name = "Joe"

        assert events == []


class TestSaveResource:

    @pytest.mark.asyncio
    async def test_create_posts_and_assigns_id(self, server, transport):
        server.respond_with("POST", "/contacts", status=201,
                            body={"id": 5, "first_name": "Joe", "last_name": "Blow"})
        contact = Contact(first_name="Joe", last_name="Blow")

        assert contact.is_new()
        await contact.save_resource()

        assert server.requests[0].method == "POST"
        assert server.request_json() == {"contact": {"first_name": "Joe", "last_name": "Blow"}}
        assert contact.id == 5
        assert not contact.is_new()

    @pytest.mark.asyncio
    async def test_update_puts_to_resource_url(self, server, transport):
        server.respond_with("PUT", "/contacts/5", body={"id": 5, "last_name": "GO"})
        contact = Contact(id=5, first_name="Joe", last_name="Blow")

        contact.last_name = "Go"
        await contact.save_resource()

        assert server.requests[0].method == "PUT"
        assert server.request_json() == {"contact": {"first_name": "Joe", "last_name": "Go"}}
        assert contact.last_name == "GO"

    @pytest.mark.asyncio
    async def test_empty_response_keeps_local_values(self, server, transport):
        server.respond_with("PUT", "/contacts/5", status=204)
        contact = Contact(id=5, first_name="Joe")

        result = await contact.save_resource()

        assert result is None
        assert contact.first_name == "Joe"

    @pytest.mark.asyncio
    async def test_done_callbacks_see_updated_record(self, server, transport):
        server.respond_with("POST", "/contacts", body={"id": 8})
        contact = Contact(first_name="Joe")
        seen = []

        contact.save_resource().done(lambda json: seen.append(contact.id))
        await transport.wait_pending()

        assert seen == [8]

    def test_validation_failure_skips_request(self, server):
        contact = ValidatedContact()
        outcome = []

        contact.save_resource() \
            .done(lambda json: outcome.append("done")) \
            .fail(lambda error: outcome.append(error)) \
            .always(lambda: outcome.append("always"))

        assert outcome == ["first_name is required", "always"]
        assert server.requests == []

    @pytest.mark.asyncio
    async def test_awaiting_validation_failure_raises(self, server):
        with pytest.raises(ResourceValidationError) as excinfo:
            await ValidatedContact().save_resource()

        assert excinfo.value.error == "first_name is required"

    @pytest.mark.asyncio
    async def test_valid_record_is_saved(self, server, transport):
        server.respond_with("POST", "/contacts", body={"id": 1})

        contact = ValidatedContact(first_name="Joe")
        await contact.save_resource()

        assert contact.id == 1

    @pytest.mark.asyncio
    async def test_server_error_passes_through(self, server, transport):
        server.respond_with("POST", "/contacts", status=422, body={"errors": ["taken"]})
        contact = Contact(first_name="Joe")
        errors = []

        deferred = contact.save_resource().fail(errors.append)
        with pytest.raises(httpx.HTTPStatusError):
            await deferred

        assert errors[0].response.status_code == 422
        assert errors[0].response.json() == {"errors": ["taken"]}
        assert contact.is_new()

    @pytest.mark.asyncio
    async def test_unencodable_body_fails(self, server, transport):
        class Meeting(Resource):
            model_config = ResourceConfig(url="/meetings",
                                          resource_name="meeting",
                                          resource_properties=["starts_at"])

            starts_at: Optional[datetime] = None

        meeting = Meeting(starts_at=datetime(2024, 5, 1, 9, 30))
        outcome = []

        deferred = meeting.save_resource() \
            .fail(lambda error: outcome.append(type(error))) \
            .always(lambda: outcome.append("always"))
        with pytest.raises(TypeError):
            await deferred

        assert outcome == [TypeError, "always"]
        assert server.requests == []
        assert meeting.is_new()

    @pytest.mark.asyncio
    async def test_prepare_resource_request_hook(self, server, transport):
        class TokenContact(Contact):
            def _prepare_resource_request(self, params):
                params.headers["Authorization"] = "Bearer secret"

        server.respond_with("POST", "/contacts", body={"id": 3})
        await TokenContact(first_name="Joe").save_resource()

        assert server.requests[0].headers["Authorization"] == "Bearer secret"


class TestDestroyResource:

    @pytest.mark.asyncio
    async def test_destroy_sends_delete(self, server, transport, store):
        server.respond_with("DELETE", "/contacts/1", status=204)
        store.contacts.load({"id": 1, "first_name": "Joe"})
        contact = store.contacts.find_by_id(1)

        await contact.destroy_resource()

        assert server.requests[0].method == "DELETE"
        assert server.requests[0].url.path == "/contacts/1"
        assert contact in store.contacts
