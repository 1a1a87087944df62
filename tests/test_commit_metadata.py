import pytest

from kingfisher.commit_metadata import CommitMetadata, GitTime, parse_signature_time

OID = "e69de29bb2d1d6434b8b29ae775ad8c2e48c5391"


def _metadata(**overrides):
    fields = dict(
        commit_id=OID,
        committer_name=b"Alice",
        committer_email=b"alice@example.com",
        committer_timestamp=GitTime.parse("1700000000 +0100"),
    )
    fields.update(overrides)
    return CommitMetadata(**fields)


def test_parse_raw_form():
    parsed = GitTime.parse("1700000000 +0100")
    assert parsed.seconds == 1700000000
    assert parsed.offset == 3600


@pytest.mark.parametrize("text", ["1700000000 +0100", "1700000000 -0530", "0 +0000"])
def test_raw_form_round_trip(text):
    assert str(GitTime.parse(text)) == text


def test_negative_offset_sign():
    parsed = GitTime.parse("1700000000 -0530")
    assert parsed.offset < 0
    assert parsed.seconds == 1700000000


def test_iso_and_raw_agree():
    iso = GitTime.parse("2023-11-14T22:13:20+00:00")
    raw = GitTime.parse("1700000000 +0000")
    assert iso == raw


def test_parse_rejects_garbage():
    with pytest.raises(ValueError):
        GitTime.parse("not a date")


def test_signature_time_falls_back_to_epoch():
    assert parse_signature_time(b"\xff\xfe") == GitTime(0, 0)
    assert parse_signature_time("garbage") == GitTime(0, 0)


def test_signature_time_parses_valid_bytes():
    assert parse_signature_time(b"1700000000 +0100") == GitTime.parse("1700000000 +0100")


def test_metadata_round_trip():
    original = _metadata()
    assert CommitMetadata.from_dict(original.to_dict()) == original


def test_to_dict_fields():
    data = _metadata().to_dict()
    assert data["commit_id"] == OID
    assert data["committer_email"] == "alice@example.com"
    assert data["committer_timestamp"] == "1700000000 +0100"


def test_to_dict_decodes_lossily():
    data = _metadata(committer_name=b"Al\xffice").to_dict()
    assert data["committer_name"] == "Al\ufffdice"


def test_commit_id_normalised_to_lowercase():
    assert _metadata(commit_id=OID.upper()).commit_id == OID


def test_invalid_commit_id_rejected():
    with pytest.raises(ValueError):
        _metadata(commit_id="abc")
    with pytest.raises(ValueError):
        CommitMetadata.from_dict({**_metadata().to_dict(), "commit_id": "z" * 40})


def test_from_dict_missing_field():
    data = _metadata().to_dict()
    del data["committer_email"]
    with pytest.raises(ValueError):
        CommitMetadata.from_dict(data)


def test_from_dict_bad_timestamp():
    with pytest.raises(ValueError):
        CommitMetadata.from_dict({**_metadata().to_dict(), "committer_timestamp": "nope"})