import pytest
from sqlalchemy import select
from sqlalchemy.orm import selectinload

from jsonapi_client.config import PayloadConfig
from jsonapi_client.core.errors import UNSUPPORTED_ENTITY_MESSAGE, UnknownEntryError
from jsonapi_client.entities import EntityCollection, hydrate
from jsonapi_client.payload import Payload

from tests.models import Gallery, Image, Tag


def load_images(session, *ids):
    stmt = (
        select(Image)
        .where(Image.id.in_(ids))
        .order_by(Image.id)
        .options(selectinload(Image.gallery), selectinload(Image.tags))
    )
    images = session.scalars(stmt).all()
    session.close()
    return images


def pointer(resource_type, resource_id):
    return {"type": resource_type, "id": resource_id, "exists": True}


def test_set_rejects_non_entity(payload):
    payload.set({"hello": "world"})

    assert payload.errors() == [
        {"status": 500, "code": 500, "message": UNSUPPORTED_ENTITY_MESSAGE}
    ]
    assert payload.data() == []


def test_set_keeps_processing_after_non_entity(payload):
    payload.set([{"hello": "world"}, Gallery(name="Foo")])

    assert len(payload.errors()) == 1
    assert payload.data() == {
        "type": "Gallery",
        "exists": False,
        "attributes": {"name": "Foo"},
    }


def test_set_aggregates_validation_errors(payload):
    invalid = Gallery()
    invalid.invalidate({"name": "is required"})

    payload.set([invalid, Gallery(name="Valid")])

    assert payload.errors() == [
        {
            "status": 422,
            "code": 422,
            "title": "Validation Error",
            "meta": [{"name": ["is required"]}, None],
        }
    ]
    assert payload.serialize() == {"errors": payload.errors()}


def test_delete_payload(payload, session):
    images = session.scalars(select(Image).order_by(Image.id)).all()
    session.close()

    payload.delete(images)

    assert payload.serialize() == {
        "data": [pointer("Image", index) for index in range(1, 6)]
    }


def test_serialize_empty_payload(payload):
    assert payload.serialize() == {"data": []}
    assert payload.is_collection()


def test_serialize_new_entities_inline(payload):
    image = Image(title="Amiga 1200")
    image.tags.append(Tag(name="Computer"))
    image.tags.append(Tag(name="Science"))
    image.gallery = Gallery(name="Gallery 1")

    payload.set(image)

    assert payload.data() == {
        "type": "Image",
        "exists": False,
        "attributes": {
            "gallery_id": None,
            "name": None,
            "title": "Amiga 1200",
            "gallery": {"name": "Gallery 1"},
            "tags": [{"name": "Computer"}, {"name": "Science"}],
        },
    }
    assert payload.included() == []
    assert payload.embedded() == []


def test_serialize_new_entity_with_client_assigned_id_stays_inline(payload):
    image = Image(id=7, title="Amiga 1200")
    image.tags.append(Tag(id=9, name="Computer"))

    payload.set(image)

    data = payload.data()
    assert data["id"] == 7
    assert data["exists"] is False
    assert data["attributes"]["tags"] == [{"name": "Computer", "id": 9}]
    assert "relationships" not in data
    assert payload.included() == []


def test_serialize_new_and_existing_entities(payload):
    image = Image(title="Amiga 1200")
    image.tags.append(hydrate(Tag, {"id": 1, "name": "Computer"}))
    image.tags.append(hydrate(Tag, {"id": 2, "name": "Science"}))
    image.gallery = Gallery(name="Gallery 1")

    payload.set(image)

    data = payload.data()
    assert data["attributes"]["gallery"] == {"name": "Gallery 1"}
    assert "tags" not in data["attributes"]
    assert data["relationships"] == {
        "tags": {"data": [pointer("Tag", 1), pointer("Tag", 2)]}
    }
    assert payload.included() == [
        {"type": "Tag", "id": 1, "exists": True, "attributes": {"name": "Computer"}},
        {"type": "Tag", "id": 2, "exists": True, "attributes": {"name": "Science"}},
    ]
    assert payload.embedded() == ["tags"]


def test_serialize_existing_entities(payload, session):
    [image] = load_images(session, 1)

    payload.set(image)

    assert not payload.is_collection()
    assert payload.data() == {
        "type": "Image",
        "id": 1,
        "exists": True,
        "attributes": {"gallery_id": 1, "name": "amiga_1200.jpg", "title": "Amiga 1200"},
        "relationships": {
            "gallery": {"data": pointer("Gallery", 1)},
            "tags": {"data": [pointer("Tag", 1), pointer("Tag", 3)]},
        },
    }
    assert payload.included() == [
        {"type": "Gallery", "id": 1, "exists": True, "attributes": {"name": "Foo Gallery"}},
        {"type": "Tag", "id": 1, "exists": True, "attributes": {"name": "High Tech"}},
        {"type": "Tag", "id": 3, "exists": True, "attributes": {"name": "Computer"}},
    ]
    assert payload.embedded() == ["gallery", "tags"]


def test_pivot_relation_is_suppressed(payload, session):
    stmt = (
        select(Image)
        .where(Image.id == 1)
        .options(selectinload(Image.tags), selectinload(Image.images_tags))
    )
    image = session.scalars(stmt).one()
    session.close()

    payload.set(image)

    data = payload.data()
    assert list(data["relationships"]) == ["tags"]
    assert "images_tags" not in data["attributes"]
    assert all(resource["type"] == "Tag" for resource in payload.included())


def test_included_is_deduplicated(payload, session):
    images = load_images(session, 1, 4)

    payload.set(images)

    assert payload.is_collection()
    assert [item["id"] for item in payload.data()] == [1, 4]
    assert payload.data()[1]["relationships"]["tags"] == {
        "data": [pointer("Tag", 1), pointer("Tag", 3), pointer("Tag", 6)]
    }
    assert [(item["type"], item["id"]) for item in payload.included()] == [
        ("Gallery", 1),
        ("Tag", 1),
        ("Tag", 3),
        ("Gallery", 2),
        ("Tag", 6),
    ]


def test_embed_false_skips_relationships(payload, session):
    [image] = load_images(session, 1)

    payload.set(image, embed=False)

    assert payload.data() == {
        "type": "Image",
        "id": 1,
        "exists": True,
        "attributes": {"gallery_id": 1, "name": "amiga_1200.jpg", "title": "Amiga 1200"},
    }
    assert payload.included() == []


def test_embed_selects_relations(payload, session):
    [image] = load_images(session, 1)

    payload.set(image, embed=["gallery"])

    assert list(payload.data()["relationships"]) == ["gallery"]
    assert [item["type"] for item in payload.included()] == ["Gallery"]


def test_collection_meta_is_preserved(payload, session):
    images = load_images(session, 1, 2)

    payload.set(EntityCollection(images, meta={"count": 10}), embed=False)

    assert payload.is_collection()
    assert [item["attributes"]["name"] for item in payload.data()] == [
        "amiga_1200.jpg",
        "srinivasa_ramanujan.jpg",
    ]
    assert payload.meta() == {"count": 10}
    assert payload.serialize()["meta"] == {"count": 10}


def test_null_attributes_are_kept(payload):
    image = hydrate(Image, {"id": 1, "gallery_id": 0, "name": None, "title": ""})

    payload.set(image)

    assert payload.data() == {
        "type": "Image",
        "id": 1,
        "exists": True,
        "attributes": {"gallery_id": 0, "name": None, "title": ""},
    }


def test_links_are_built_when_configured(session):
    def link(resource_type, params):
        if "id" in params:
            return f"/{resource_type}/{params['id']}"
        return f"/{resource_type}?{params['relation']}={params['rid']}"

    [image] = load_images(session, 1)
    payload = Payload(PayloadConfig(link=link))

    payload.set(image)

    data = payload.data()
    assert data["links"] == {"self": "/Image/1"}
    assert data["relationships"]["gallery"]["links"] == {"related": "/Gallery?images=1"}
    assert payload.included()[0]["links"] == {"self": "/Gallery/1"}


def test_custom_exporter(session):
    [image] = load_images(session, 1)
    payload = Payload(PayloadConfig(exporter=lambda entity: {"title": entity.instance.title.upper()}))

    payload.set(image, embed=False)

    assert payload.data()["attributes"] == {"title": "AMIGA 1200"}


def test_keys_and_export_by_id(payload, session):
    images = load_images(session, 1, 4)
    payload.set(images)

    assert payload.keys() == [1, 4]
    assert payload.export(1) == [
        {
            "id": 1,
            "gallery_id": 1,
            "name": "amiga_1200.jpg",
            "title": "Amiga 1200",
            "gallery": {"id": 1, "name": "Foo Gallery"},
            "tags": [{"id": 1, "name": "High Tech"}, {"id": 3, "name": "Computer"}],
        }
    ]


def test_export_unknown_id(payload, session):
    payload.set(load_images(session, 1))

    with pytest.raises(UnknownEntryError) as exc_info:
        payload.export(99)
    assert str(exc_info.value) == "Unexisting data entry for id `99` in the JSON-API payload."


def test_reset(payload, session):
    payload.set(EntityCollection(load_images(session, 1, 4), meta={"count": 2}))
    payload.set({"hello": "world"})

    payload.reset()

    assert payload.serialize() == {"data": []}
    assert payload.included() == []
    assert payload.errors() == []
    assert payload.meta() == {}
    assert payload.keys() == []
