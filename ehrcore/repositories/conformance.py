# ehrcore/repositories/conformance.py
import uuid

from ehrcore.models.conformance import (
    MessageDefinition,
    MessageHeader,
    NamingSystem,
    NamingSystemUniqueId,
    OperationDefinition,
    OperationDefinitionParameter,
)
from ehrcore.repositories.base import ResourceRepository
from ehrcore.repositories.search import contains, date_param, reference, string, token


class NamingSystemRepository(ResourceRepository[NamingSystem]):
    model = NamingSystem
    search_params = {
        "status": token("status"),
        "name": string("name"),
        "kind": token("kind"),
        "publisher": contains("publisher"),
        "date": date_param("date"),
    }

    def add_unique_id(self, unique_id: NamingSystemUniqueId) -> NamingSystemUniqueId:
        return self._add_child(NamingSystemUniqueId, unique_id)

    def get_unique_ids(self, naming_system_id: uuid.UUID | str) -> list[NamingSystemUniqueId]:
        return self._get_children(NamingSystemUniqueId, naming_system_id)


class OperationDefinitionRepository(ResourceRepository[OperationDefinition]):
    model = OperationDefinition
    search_params = {
        "status": token("status"),
        "name": string("name"),
        "code": token("code"),
        "kind": token("kind"),
        "url": token("url"),
    }

    def add_parameter(self, parameter: OperationDefinitionParameter) -> OperationDefinitionParameter:
        return self._add_child(OperationDefinitionParameter, parameter)

    def get_parameters(self, operation_definition_id: uuid.UUID | str) -> list[OperationDefinitionParameter]:
        return self._get_children(OperationDefinitionParameter, operation_definition_id)


class MessageDefinitionRepository(ResourceRepository[MessageDefinition]):
    model = MessageDefinition
    search_params = {
        "status": token("status"),
        "name": string("name"),
        "event": token("event_coding_code", system_column="event_coding_system"),
        "category": token("category"),
        "url": token("url"),
    }


class MessageHeaderRepository(ResourceRepository[MessageHeader]):
    model = MessageHeader
    search_params = {
        "event": token("event_coding_code", system_column="event_coding_system"),
        "source": string("source_name"),
        "source-uri": token("source_endpoint"),
        "destination": string("destination_name"),
        "sender": reference("sender_org_id"),
        "code": token("response_code"),
    }
