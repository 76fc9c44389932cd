import pytest

from personhints.core.config import Settings
from personhints.knowledge.loader import InMemoryPersonLoader
from personhints.knowledge.properties import StaticPropertyResolver
from personhints.models.person import PersonRef
from personhints.orchestration.pipeline import HintPipeline
from personhints.orchestration.registry import InMemoryHintsRegistry

PERSON_CLASS = "http://www.w3.org/ns/person#Person"
ZITTING_CLASS = "http://data.vlaanderen.be/ns/besluit#Zitting"
ARTIKEL_CLASS = "http://data.vlaanderen.be/ns/besluit#Artikel"
SCOPE = "http://data.lblod.info/id/bestuursorganen/gemeenteraad-gent"


@pytest.fixture
def felix():
    return PersonRef.model_validate(
        {"id": "p-felix", "gebruikteVoornaam": "Felix", "achternaam": "Ruiz", "uri": "http://data.example/p/felix"}
    )


@pytest.fixture
def marie():
    return PersonRef.model_validate({"id": "p-marie", "gebruikteVoornaam": "Marie", "achternaam": "Felsen"})


@pytest.fixture
def loader(felix, marie):
    return InMemoryPersonLoader({SCOPE: [felix, marie]})


@pytest.fixture
def resolver():
    return StaticPropertyResolver(
        {
            ZITTING_CLASS: {
                "http://data.vlaanderen.be/ns/besluit#heeftAanwezigeBijStart": PERSON_CLASS,
                "http://data.vlaanderen.be/ns/besluit#isGehoudenDoor": "http://data.vlaanderen.be/ns/besluit#Bestuursorgaan",
            },
            ARTIKEL_CLASS: {
                "http://data.europa.eu/eli/ontology#number": "http://www.w3.org/2001/XMLSchema#string",
            },
        }
    )


@pytest.fixture
def registry():
    return InMemoryHintsRegistry()


@pytest.fixture
def config():
    return Settings(DEBOUNCE_SECONDS=0.0)


@pytest.fixture
def pipeline(resolver, registry, config):
    return HintPipeline(property_resolver=resolver, sink=registry, config=config)


@pytest.fixture
def make_context():
    def _make(text, start=0, class_uri=ZITTING_CLASS, predicate="a"):
        return {
            "text": text,
            "region": [start, start + len(text)],
            "context": [{"subject": "http://data.example/zitting/1", "predicate": predicate, "object": class_uri}],
        }

    return _make
