import pytest

import api_client
from api_client import ApiError
from schemas import BriefDetail, SheetDetail, SheetQuestion
from workbench import brief_editor, domains, sheet_editor

from conftest import brief, domain, sheet


@pytest.fixture
def brief_open(state, monkeypatch):
    state["brief_id"] = "b1"
    monkeypatch.setattr(
        api_client,
        "fetch_brief_detail",
        lambda bid: BriefDetail(id=bid, title="Vertrieb", status="draft", version=2, raw_markdown="# alt"),
    )
    assert brief_editor.open_brief_editor(state)
    return state


def test_edits_accumulate_and_revert_out_of_patch(brief_open):
    brief_editor.set_brief_field(brief_open, "title", "Vertrieb neu")
    brief_editor.set_brief_field(brief_open, "raw_markdown", "# neu")
    assert brief_open["brief_patch"] == {"title": "Vertrieb neu", "raw_markdown": "# neu"}

    brief_editor.set_brief_field(brief_open, "title", "Vertrieb")
    assert brief_open["brief_patch"] == {"raw_markdown": "# neu"}
    assert brief_editor.brief_draft(brief_open).raw_markdown == "# neu"
    assert brief_open["brief_detail"].raw_markdown == "# alt"


def test_version_is_not_editable(brief_open):
    with pytest.raises(KeyError):
        brief_editor.set_brief_field(brief_open, "version", 7)


def test_saving_empty_patch_sends_nothing(brief_open, monkeypatch):
    monkeypatch.setattr(api_client, "update_brief", lambda bid, patch: pytest.fail("request issued"))
    assert brief_editor.save_brief(brief_open)
    assert brief_open["notice"] == "Keine Änderungen zu speichern."


def test_save_replaces_detail_with_server_copy(brief_open, monkeypatch):
    sent = {}

    def fake_update(bid, patch):
        sent.update(patch)
        return BriefDetail(id=bid, title="Neu", status="draft", version=3, raw_markdown="# alt")

    monkeypatch.setattr(api_client, "update_brief", fake_update)
    monkeypatch.setattr(api_client, "fetch_briefs", lambda: [brief("b1", "Neu", 3)])
    brief_editor.set_brief_field(brief_open, "title", "Neu")

    assert brief_editor.save_brief(brief_open)

    assert sent == {"title": "Neu"}
    assert brief_open["brief_detail"].version == 3
    assert brief_open["brief_patch"] == {}
    assert brief_open["briefs"][0].title == "Neu"
    assert brief_open["saving_brief"] is False


def test_failed_save_keeps_patch(brief_open, monkeypatch):
    def broken(bid, patch):
        raise ApiError("Fehler beim Speichern", 422, "invalid status")

    monkeypatch.setattr(api_client, "update_brief", broken)
    brief_editor.set_brief_field(brief_open, "status", "kaputt")

    assert brief_editor.save_brief(brief_open) is False
    assert brief_open["brief_patch"] == {"status": "kaputt"}
    assert "invalid status" in brief_open["error"]


# ---- domains ----

@pytest.fixture
def with_domains(state):
    state["domains"] = [domain("d0", "Unbekannt"), domain("d1", "Vertrieb")]
    return state


def test_fallback_domain_is_locked(with_domains, monkeypatch):
    monkeypatch.setattr(api_client, "delete_domain", lambda did: pytest.fail("request issued"))
    monkeypatch.setattr(api_client, "update_domain", lambda did, payload: pytest.fail("request issued"))

    assert domains.delete_domain(with_domains, "d0") is False
    assert with_domains["error"] == domains.FALLBACK_LOCKED
    assert domains.update_domain(with_domains, "d0", "Anders") is False
    assert [d.id for d in domains.editable_domains(with_domains["domains"])] == ["d1"]


def test_fallback_name_match_ignores_case_and_whitespace():
    assert domain("x", "  unbekannt ").is_fallback
    assert not domain("x", "Unbekannte Domäne").is_fallback


@pytest.mark.parametrize(
    "status, body",
    [(409, "conflict"), (400, '{"error":"domain_in_use"}')],
)
def test_delete_domain_in_use(with_domains, monkeypatch, status, body):
    def in_use(did):
        raise ApiError("Fehler beim Löschen der Domäne", status, body)

    monkeypatch.setattr(api_client, "delete_domain", in_use)
    assert domains.delete_domain(with_domains, "d1") is False
    assert with_domains["error"] == domains.DOMAIN_IN_USE


def test_delete_domain_drops_it_from_pending_brief_patch(with_domains, monkeypatch):
    monkeypatch.setattr(api_client, "delete_domain", lambda did: None)
    monkeypatch.setattr(api_client, "fetch_domains", lambda: [domain("d0", "Unbekannt")])
    with_domains["brief_patch"] = {"domain_id": "d1", "title": "X"}

    assert domains.delete_domain(with_domains, "d1")
    assert with_domains["brief_patch"] == {"title": "X"}
    assert [d.id for d in with_domains["domains"]] == ["d0"]


def test_create_domain_requires_name(state, monkeypatch):
    monkeypatch.setattr(api_client, "create_domain", lambda payload: pytest.fail("request issued"))
    assert domains.create_domain(state, "  ") is False
    assert state["error"]


# ---- sheet editor ----

@pytest.fixture
def sheet_open(state, monkeypatch):
    state["sheet_id"] = "s1"
    monkeypatch.setattr(api_client, "fetch_sheet_detail", lambda sid: SheetDetail(id=sid, name="Sheet A", theme="Daten"))
    monkeypatch.setattr(
        api_client,
        "fetch_sheet_questions",
        lambda sid: [
            SheetQuestion(id="q1", code="A", question="Erste?", order_index=1),
            SheetQuestion(id="q2", code="B", question="Zweite?", order_index=2),
        ],
    )
    assert sheet_editor.open_sheet_editor(state)
    return state


def orders(state):
    return [(q.code, q.order_index) for q in state["questions"]]


def test_add_remove_move_keep_order_index_positional(sheet_open):
    sheet_editor.add_question(sheet_open)
    assert orders(sheet_open) == [("A", 1), ("B", 2), ("Q3", 3)]
    assert sheet_open["questions"][2].id is None

    sheet_editor.move_question(sheet_open, 2, -2)
    assert orders(sheet_open) == [("Q3", 1), ("A", 2), ("B", 3)]

    sheet_editor.remove_question(sheet_open, 1)
    assert orders(sheet_open) == [("Q3", 1), ("B", 2)]


def test_move_beyond_edges_is_ignored(sheet_open):
    sheet_editor.move_question(sheet_open, 0, -1)
    sheet_editor.move_question(sheet_open, 1, 1)
    assert orders(sheet_open) == [("A", 1), ("B", 2)]


def test_update_question_and_parse_checkpoints(sheet_open):
    sheet_editor.update_question(sheet_open, 0, checkpoints=sheet_editor.parse_checkpoints("eins\n\n  zwei \n"))
    assert sheet_open["questions"][0].checkpoints == ["eins", "zwei"]
    with pytest.raises(KeyError):
        sheet_editor.update_question(sheet_open, 0, order_index=9)


def test_save_sheet_uses_backend_question_list(sheet_open, monkeypatch):
    calls = []

    def fake_update_sheet(sid, patch):
        calls.append(("patch", patch))
        return SheetDetail(id=sid, name="Sheet Neu", theme="Daten")

    def fake_update_questions(sid, questions):
        calls.append(("questions", [q.code for q in questions]))
        return [SheetQuestion(id="q1", code="A", question="Erste?", order_index=1)]

    monkeypatch.setattr(api_client, "update_sheet", fake_update_sheet)
    monkeypatch.setattr(api_client, "update_sheet_questions", fake_update_questions)
    monkeypatch.setattr(api_client, "fetch_sheets", lambda: [sheet("s1", "Sheet Neu")])

    sheet_editor.set_sheet_field(sheet_open, "name", "Sheet Neu")
    sheet_editor.remove_question(sheet_open, 1)
    assert sheet_editor.save_sheet(sheet_open)

    assert calls == [("patch", {"name": "Sheet Neu"}), ("questions", ["A"])]
    assert sheet_open["sheet_detail"].name == "Sheet Neu"
    assert sheet_open["sheet_patch"] == {}
    assert [q.id for q in sheet_open["questions"]] == ["q1"]


def test_save_sheet_without_patch_only_writes_questions(sheet_open, monkeypatch):
    monkeypatch.setattr(api_client, "update_sheet", lambda sid, patch: pytest.fail("sheet patched"))
    monkeypatch.setattr(api_client, "update_sheet_questions", lambda sid, qs: qs)
    monkeypatch.setattr(api_client, "fetch_sheets", lambda: [])
    assert sheet_editor.save_sheet(sheet_open)


def test_close_sheet_editor_drops_local_edits(sheet_open):
    sheet_editor.add_question(sheet_open)
    sheet_editor.close_sheet_editor(sheet_open)
    assert sheet_open["questions"] == []
    assert sheet_open["sheet_detail"] is None


def test_domain_options_keep_unloaded_domain():
    loaded = [domain("d0", "Unbekannt")]
    assert brief_editor.domain_options(loaded, "d7") == [None, "d0", "d7"]
    assert brief_editor.domain_options(loaded, "d0") == [None, "d0"]
    assert brief_editor.domain_options(loaded, None) == [None, "d0"]


def test_unchanged_unloaded_domain_creates_no_patch(brief_open):
    brief_open["brief_detail"] = BriefDetail(id="b1", title="Vertrieb", domain_id="d7")
    brief_open["domains"] = [domain("d0", "Unbekannt")]
    options = brief_editor.domain_options(brief_open["domains"], "d7")

    brief_editor.set_brief_field(brief_open, "domain_id", options[options.index("d7")])

    assert brief_open["brief_patch"] == {}


def test_selecting_another_brief_closes_editor(brief_open):
    from workbench import selection

    selection.select_brief(brief_open, "b2")
    assert brief_open["brief_editor_open"] is False
    assert brief_open["brief_detail"] is None


def test_unknown_domain_id_is_not_sent(with_domains, monkeypatch):
    monkeypatch.setattr(api_client, "delete_domain", lambda did: pytest.fail("request issued"))
    monkeypatch.setattr(api_client, "update_domain", lambda did, payload: pytest.fail("request issued"))

    assert domains.delete_domain(with_domains, "d99") is False
    assert with_domains["error"] == domains.UNKNOWN_DOMAIN
    assert domains.update_domain(with_domains, "d99", "Neu") is False


def test_move_across_several_rows_keeps_others_in_order(sheet_open):
    sheet_editor.add_question(sheet_open)
    sheet_editor.add_question(sheet_open)
    assert orders(sheet_open) == [("A", 1), ("B", 2), ("Q3", 3), ("Q4", 4)]

    sheet_editor.move_question(sheet_open, 0, 3)
    assert orders(sheet_open) == [("B", 1), ("Q3", 2), ("Q4", 3), ("A", 4)]


def test_selecting_another_sheet_closes_editor(sheet_open):
    from workbench import selection

    selection.select_sheet(sheet_open, "s2")
    assert sheet_open["sheet_editor_open"] is False
    assert sheet_open["questions"] == []


def test_delete_from_editor_targets_open_sheet(sheet_open, monkeypatch):
    deleted = []
    monkeypatch.setattr(api_client, "delete_sheet", deleted.append)
    monkeypatch.setattr(api_client, "fetch_sheets", lambda: [sheet("s2", "Sheet B")])
    # list selection drifted away from the sheet in the editor
    sheet_open["sheet_id"] = "s2"

    assert sheet_editor.delete_from_editor(sheet_open)

    assert deleted == ["s1"]
    assert sheet_open["sheet_editor_open"] is False
    assert sheet_open["sheet_id"] == "s2"


def test_delete_from_editor_without_open_sheet(state, monkeypatch):
    monkeypatch.setattr(api_client, "delete_sheet", lambda sid: pytest.fail("request issued"))
    state["sheet_id"] = "s1"
    assert sheet_editor.delete_from_editor(state) is False
