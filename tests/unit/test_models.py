import pytest

from personhints.core.config import RDF_TYPE, Settings
from personhints.core.exceptions import MalformedContextError
from personhints.models import PersonRef, TextContext, TextSpan, Token


def test_person_full_name_is_derived_from_parts():
    person = PersonRef.model_validate({"id": "p-1", "gebruikteVoornaam": "Felix", "achternaam": "Ruiz"})

    assert person.full_name == "Felix Ruiz"
    assert person.first_name_used == "Felix"
    assert person.last_name == "Ruiz"


def test_person_explicit_full_name_wins():
    person = PersonRef.model_validate({"id": "p-1", "fullName": "Felix Ruiz de Arcaute", "achternaam": "Ruiz"})

    assert person.full_name == "Felix Ruiz de Arcaute"


def test_person_refs_are_hashable_and_immutable():
    first = PersonRef(id="p-1", first_name_used="Felix", last_name="Ruiz")
    second = PersonRef(id="p-1", first_name_used="Felix", last_name="Ruiz")

    assert {first, second} == {first}
    with pytest.raises(Exception):
        first.last_name = "Other"


def test_text_span_helpers():
    span = TextSpan.of([4, 10])

    assert span == TextSpan.of({"start": 4, "end": 10})
    assert span.shift(5) == TextSpan(9, 15)
    assert span.contains(TextSpan(4, 10))
    assert span.contains(TextSpan(5, 7))
    assert not span.contains(TextSpan(3, 7))
    assert len(span) == 6
    assert span.as_tuple() == (4, 10)
    with pytest.raises(ValueError):
        TextSpan(5, 4)


def test_context_parse_accepts_pairs_and_triples():
    context = TextContext.parse(
        {
            "text": "Felix Ruiz",
            "region": [20, 30],
            "context": [{"subject": "s", "predicate": "a", "object": "http://x/Zitting"}],
        }
    )

    assert context.region == TextSpan(20, 30)
    assert context.last_triple.object == "http://x/Zitting"
    assert TextContext.parse(context) is context


@pytest.mark.parametrize(
    "raw",
    [
        {"region": [0, 5]},
        {"text": "Felix"},
        {"text": "Felix", "region": [5, 0]},
        {"text": "Felix", "region": None},
        {"text": "Felix", "region": {"begin": 0}},
        None,
    ],
)
def test_context_parse_rejects_malformed_input(raw):
    with pytest.raises(MalformedContextError) as excinfo:
        TextContext.parse(raw)

    assert excinfo.value.error_code == "MALFORMED_CONTEXT"


def test_token_resolution_leaves_original_untouched():
    person = PersonRef(id="p-1", first_name_used="Felix", last_name="Ruiz")
    token = Token(location=TextSpan(0, 5), sanitized_string="Felix")

    resolved = token.resolved(100, [person])

    assert resolved.normalized_location == TextSpan(100, 105)
    assert resolved.matched_persons == (person,)
    assert token.normalized_location is None
    assert token.matched_persons == ()


def test_settings_parse_comma_separated_predicates(monkeypatch):
    monkeypatch.setenv("PERSON_HINTS_CLASS_ASSERTION_PREDICATES", "a, rdf:type")
    monkeypatch.setenv("PERSON_HINTS_DEBOUNCE_SECONDS", "0.05")
    monkeypatch.setenv("PERSON_HINTS_LOG_LEVEL", "debug")

    config = Settings()

    assert config.CLASS_ASSERTION_PREDICATES == ["a", "rdf:type"]
    assert config.DEBOUNCE_SECONDS == 0.05
    assert config.LOG_LEVEL == "DEBUG"


def test_settings_defaults():
    config = Settings()

    assert config.MIN_TOKEN_LENGTH == 3
    assert config.MAX_GROUP_SIZE == 5
    assert config.OWNER_TAG == "editor-plugins/personen-card"
    assert RDF_TYPE in config.CLASS_ASSERTION_PREDICATES
