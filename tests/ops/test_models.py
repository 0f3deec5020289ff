from __future__ import annotations

import pytest

from replimongo.errors import ErrorKind, InputError
from replimongo.ops.models import DispatchResult, OperationDescriptor, OperationKind


class TestFromDict:
    def test_parses_full_payload(self) -> None:
        op = OperationDescriptor.from_dict(
            {
                "operation": "updateOne",
                "collection": "students",
                "filter": {"Id_Estudiante": "A1"},
                "data": {"$set": {"Nombre": "Ana"}},
                "options": {"upsert": True},
            }
        )

        assert op.kind is OperationKind.UPDATE_ONE
        assert op.collection == "students"
        assert op.filter == {"Id_Estudiante": "A1"}
        assert op.data == {"$set": {"Nombre": "Ana"}}
        assert op.pipeline is None
        assert op.options == {"upsert": True}

    def test_every_label_maps_to_a_kind(self) -> None:
        for kind in OperationKind:
            op = OperationDescriptor.from_dict({"operation": kind.value, "collection": "c"})
            assert op.kind is kind

    def test_unknown_label_is_kept_as_string(self) -> None:
        op = OperationDescriptor.from_dict({"operation": "bulkWrite", "collection": "c"})

        assert op.kind == "bulkWrite"
        assert not isinstance(op.kind, OperationKind)
        assert op.label == "bulkWrite"

    @pytest.mark.parametrize(
        "payload",
        [
            None,
            [],
            "insertOne",
            {"collection": "students"},
            {"operation": "", "collection": "students"},
            {"operation": "insertOne"},
            {"operation": "insertOne", "collection": 3},
            {"operation": "find", "collection": "c", "filter": [1]},
            {"operation": "aggregate", "collection": "c", "pipeline": {"$match": {}}},
            {"operation": "find", "collection": "c", "options": "sort"},
        ],
    )
    def test_malformed_payload_raises_input_error(self, payload) -> None:
        with pytest.raises(InputError):
            OperationDescriptor.from_dict(payload)


class TestDispatchResult:
    def test_ok_never_reports_negative_counts(self) -> None:
        assert DispatchResult.ok(-1).affected_count == 0

    def test_failed_has_no_affected_count(self) -> None:
        result = DispatchResult.failed(ErrorKind.OPERATION_ERROR, "boom")

        assert result.success is False
        assert result.affected_count is None
