import pytest
from pydantic import ValidationError

from deck_agent.tool_arguments import (
    ARGUMENT_MODELS,
    AddSlideArguments,
    parse_tool_arguments,
)
from deck_agent.tool_schemas import (
    DOCUMENT_WRITE_TOOLS,
    READ_ONLY_TOOLS,
    THEMES,
    get_tool_definition,
    get_tool_definitions,
    is_known_tool,
    tool_names,
)


def test_registry_declares_fixed_operation_set_in_order():
    assert tool_names() == [
        "get_all_slides",
        "get_total_slides",
        "replace_all_slides",
        "clear_all_slides",
        "update_slide",
        "delete_slide",
        "add_slide",
        "change_theme",
    ]


def test_every_schema_is_closed_world_object():
    for tool in get_tool_definitions():
        assert tool.parameters["type"] == "object"
        assert tool.parameters["additionalProperties"] is False
        assert tool.description


@pytest.mark.parametrize(
    "name,required",
    [
        ("get_all_slides", []),
        ("get_total_slides", []),
        ("replace_all_slides", ["slides"]),
        ("clear_all_slides", []),
        ("update_slide", ["index", "content"]),
        ("delete_slide", ["index"]),
        ("add_slide", ["content"]),
        ("change_theme", ["theme"]),
    ],
)
def test_required_fields(name, required):
    assert get_tool_definition(name).parameters.get("required", []) == required


def test_argument_models_match_advertised_schemas():
    assert set(ARGUMENT_MODELS) == set(tool_names())
    for tool in get_tool_definitions():
        model = ARGUMENT_MODELS[tool.name]
        advertised = set(tool.parameters["properties"])
        declared = {field.alias or name for name, field in model.model_fields.items()}
        assert advertised == declared, tool.name
        required = {
            field.alias or name
            for name, field in model.model_fields.items()
            if field.is_required()
        }
        assert required == set(tool.parameters.get("required", [])), tool.name


def test_theme_enum_has_twelve_values():
    theme_schema = get_tool_definition("change_theme").parameters["properties"]["theme"]
    assert theme_schema["enum"] == list(THEMES)
    assert len(THEMES) == 12
    assert "black" in THEMES and "blood" in THEMES


def test_read_and_write_sets_do_not_overlap():
    assert READ_ONLY_TOOLS.isdisjoint(DOCUMENT_WRITE_TOOLS)
    assert READ_ONLY_TOOLS | DOCUMENT_WRITE_TOOLS | {"change_theme"} == set(tool_names())


def test_unknown_tool_lookup():
    assert not is_known_tool("rename_slide")
    with pytest.raises(KeyError):
        get_tool_definition("rename_slide")
    with pytest.raises(KeyError):
        parse_tool_arguments("rename_slide", {})


def test_unknown_fields_are_rejected():
    with pytest.raises(ValidationError):
        parse_tool_arguments("delete_slide", {"index": 0, "force": True})


def test_integral_float_index_is_accepted():
    parsed = parse_tool_arguments("update_slide", {"index": 1.0, "content": "x"})
    assert parsed.index == 1
    with pytest.raises(ValidationError):
        parse_tool_arguments("update_slide", {"index": 1.5, "content": "x"})


def test_add_slide_accepts_camel_case_slide_type_and_notes():
    parsed = parse_tool_arguments(
        "add_slide",
        {"content": "<h2>T</h2>", "slideType": "bullets", "notes": "say hello"},
    )
    assert isinstance(parsed, AddSlideArguments)
    assert parsed.slide_type == "bullets"
    assert parsed.slide_html() == '<h2>T</h2>\n<aside class="notes">say hello</aside>'


def test_invalid_theme_is_rejected():
    with pytest.raises(ValidationError):
        parse_tool_arguments("change_theme", {"theme": "neon"})
