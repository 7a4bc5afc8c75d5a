from swaggler.errors import (
    DuplicateOperationIdError,
    MalformedInputError,
    MergeError,
    SwagglerError,
)
from swaggler.generator.openapi import OpenAPIOptions
from swaggler.parser.base import ParsedRequest, is_urlencoded


class TestParsedRequest:
    def test_defaults(self):
        req = ParsedRequest()
        assert req.method == "GET"
        assert req.headers == {}
        assert req.query_params == {}
        assert req.data is None
        assert req.content_type is None

    def test_has_body(self):
        assert ParsedRequest(data={"a": "1"}).has_body is True
        assert ParsedRequest(data="text").has_body is True
        assert ParsedRequest(data=0).has_body is True
        assert ParsedRequest(data={}).has_body is False
        assert ParsedRequest(data="").has_body is False

    def test_serialization_roundtrip(self):
        req = ParsedRequest(
            method="POST",
            url="https://x.com/a",
            headers={"B": "2", "A": "1"},
            data=[1, {"x": None}],
            content_type="application/json",
        )
        again = ParsedRequest(**req.model_dump())
        assert again == req
        assert list(again.headers) == ["B", "A"]


class TestIsUrlencoded:
    def test_variants(self):
        assert is_urlencoded("application/x-www-form-urlencoded")
        assert is_urlencoded("Application/X-WWW-Form-Urlencoded; charset=UTF-8")
        assert not is_urlencoded("application/json")
        assert not is_urlencoded(None)


class TestOpenAPIOptions:
    def test_defaults(self):
        options = OpenAPIOptions()
        assert options.operation_name is None
        assert options.tags == []


class TestErrors:
    def test_codes_and_exit_codes(self):
        assert MalformedInputError("x").code == "MALFORMED_INPUT"
        assert MergeError("x").code == "MERGE_ERROR"
        assert MalformedInputError("x").exit_code == 2
        assert MergeError("x").exit_code == 4

    def test_base_error_carries_details(self):
        err = SwagglerError("boom", code="CUSTOM", details={"k": 1})
        assert str(err) == "boom"
        assert err.code == "CUSTOM"
        assert err.details == {"k": 1}
        assert MergeError("x").details == {}

    def test_duplicate_operation_id_details(self):
        err = DuplicateOperationIdError("getUser", "/users/{id}", "get", "/people/{id}", "get")
        assert isinstance(err, SwagglerError)
        assert err.operation_id == "getUser"
        assert err.details["existingPath"] == "/users/{id}"
        assert err.details["newPath"] == "/people/{id}"
