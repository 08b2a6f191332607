"""Tests for the setup code vault."""

from __future__ import annotations

import io
from pathlib import Path

from PIL import Image

from hkrestore.core import CodeVault
from hkrestore.models import SetupCodeRecord


def _jpeg_bytes() -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (4, 4), (200, 10, 10)).save(buffer, format="JPEG")
    return buffer.getvalue()


def _sample_codes() -> list[SetupCodeRecord]:
    return [
        SetupCodeRecord(
            accessory_name="Hallway Lamp", manufacturer="Eve", model="Energy", code="123-45-678"
        ),
        SetupCodeRecord(
            accessory_name="Thermostat", manufacturer="Ecobee", model="Premium", code="876-54-321"
        ),
        SetupCodeRecord(
            accessory_name="Bridge", manufacturer="Lutron", model="Caseta", code="111-22-333"
        ),
    ]


def _filled_vault(store, photo_store) -> CodeVault:
    vault = CodeVault(store, photo_store)
    for code in _sample_codes():
        assert vault.save(code)
    return vault


def test_load_empty_store(memory_store, photo_store):
    vault = CodeVault(memory_store, photo_store)
    assert vault.load() == []
    assert vault.error_message is None


def test_save_then_load_round_trip(memory_store, photo_store):
    vault = _filled_vault(memory_store, photo_store)

    restarted = CodeVault(memory_store, photo_store)
    restarted.load()

    assert restarted.codes == vault.codes
    assert [code.accessory_name for code in restarted.codes] == [
        "Hallway Lamp",
        "Thermostat",
        "Bridge",
    ]


def test_save_existing_id_replaces_in_place(memory_store, photo_store):
    vault = _filled_vault(memory_store, photo_store)
    original = vault.codes[1]
    others = [vault.codes[0], vault.codes[2]]

    edited = original.model_copy(update={"code": "999-99-999"})
    assert vault.save(edited)

    assert len(vault.codes) == 3
    assert vault.codes[1].id == original.id
    assert vault.codes[1].code == "999-99-999"
    assert vault.codes[1].updated_at >= original.updated_at
    assert vault.codes[1].created_at == original.created_at
    assert [vault.codes[0], vault.codes[2]] == others


def test_delete_removes_record_and_photo(memory_store, photo_store):
    vault = _filled_vault(memory_store, photo_store)
    target = vault.codes[0]
    assert vault.attach_photo(target, _jpeg_bytes())
    target = vault.get(target.id)
    assert target is not None and target.photo_path
    assert Path(target.photo_path).exists()

    assert vault.delete(target)

    assert vault.get(target.id) is None
    assert not Path(target.photo_path).exists()
    reloaded = CodeVault(memory_store, photo_store)
    assert reloaded.load() == vault.codes
    assert len(reloaded.codes) == 2


def test_delete_tolerates_missing_photo(memory_store, photo_store, tmp_path):
    vault = CodeVault(memory_store, photo_store)
    record = SetupCodeRecord(
        accessory_name="Lamp", code="123-45-678", photo_path=str(tmp_path / "gone.png")
    )
    assert vault.save(record)
    assert vault.delete(record)
    assert vault.codes == []


def test_photo_is_reencoded_as_png(memory_store, photo_store):
    vault = _filled_vault(memory_store, photo_store)
    record = vault.codes[0]

    assert vault.attach_photo(record, _jpeg_bytes())

    path = Path(vault.codes[0].photo_path)
    assert path == photo_store.path_for(record.id)
    assert path.name == f"{record.id}.png"
    with Image.open(path) as img:
        assert img.format == "PNG"


def test_attach_invalid_image_reports_error(memory_store, photo_store):
    vault = _filled_vault(memory_store, photo_store)

    assert not vault.attach_photo(vault.codes[0], b"not an image")

    assert vault.error_message
    assert vault.codes[0].photo_path is None


def test_decode_failure_resets_to_empty(memory_store, photo_store):
    memory_store.blob = '[{"accessoryName": "Lamp"}'
    vault = CodeVault(memory_store, photo_store)
    vault.codes = _sample_codes()

    assert vault.load() == []
    assert vault.error_message is not None
    assert "decode" in vault.error_message


def test_failed_persist_leaves_memory_unchanged(memory_store, photo_store):
    vault = _filled_vault(memory_store, photo_store)
    before = list(vault.codes)
    memory_store.fail_writes = True

    assert not vault.save(SetupCodeRecord(accessory_name="New", code="000-00-000"))
    assert vault.codes == before
    assert vault.error_message and "disk full" in vault.error_message

    assert not vault.delete(before[0])
    assert vault.codes == before

    assert not vault.delete_all()
    assert vault.codes == before


def test_search(memory_store, photo_store):
    vault = _filled_vault(memory_store, photo_store)

    assert vault.search("") == vault.codes
    assert [c.accessory_name for c in vault.search("LAMP")] == ["Hallway Lamp"]
    assert [c.accessory_name for c in vault.search("ecobee")] == ["Thermostat"]
    assert [c.accessory_name for c in vault.search("caseta")] == ["Bridge"]
    assert [c.accessory_name for c in vault.search("54-3")] == ["Thermostat"]
    assert vault.search("nothing") == []


def test_search_code_is_exact_substring(memory_store, photo_store):
    vault = CodeVault(memory_store, photo_store)
    vault.save(SetupCodeRecord(accessory_name="Tag", code="AB-12", code_format="nfc"))

    assert vault.search("AB") != []
    assert [c.accessory_name for c in vault.search("ab")] == []


def test_lookups(memory_store, photo_store):
    vault = _filled_vault(memory_store, photo_store)

    assert vault.code_for_name("hallway lamp") is vault.codes[0]
    assert [c.model for c in vault.codes_for_manufacturer("eco")] == ["Premium"]
    assert vault.counts_by_manufacturer()[0][1] == 1
    assert vault.codes_with_photos == 0


def test_delete_all_removes_photos(memory_store, photo_store):
    vault = _filled_vault(memory_store, photo_store)
    vault.attach_photo(vault.codes[0], _jpeg_bytes())
    path = Path(vault.codes[0].photo_path)

    assert vault.delete_all()

    assert vault.codes == []
    assert not path.exists()
    assert CodeVault(memory_store, photo_store).load() == []


def test_failed_photo_save_leaves_no_orphan_file(memory_store, photo_store):
    vault = _filled_vault(memory_store, photo_store)
    record = vault.codes[0]
    memory_store.fail_writes = True

    assert not vault.attach_photo(record, _jpeg_bytes())

    assert vault.codes[0].photo_path is None
    assert not photo_store.path_for(record.id).exists()
    assert "disk full" in vault.error_message
