import os

from todosync.client import FileTokenStore, MemoryTokenStore, Tokens


def test_memory_store():
    store = MemoryTokenStore()
    assert store.load() is None

    store.save(Tokens(access_token="a", refresh_token="r"))
    assert store.load().refresh_token == "r"

    store.clear()
    assert store.load() is None


def test_file_store_survives_new_instance(tmp_path):
    path = str(tmp_path / "session" / "tokens.json")
    FileTokenStore(path).save(Tokens(access_token="a", refresh_token="r"))

    restored = FileTokenStore(path).load()

    assert restored == Tokens(access_token="a", refresh_token="r", token_type="Bearer")
    assert oct(os.stat(path).st_mode & 0o777) == oct(0o600)


def test_file_store_clear(tmp_path):
    store = FileTokenStore(str(tmp_path / "tokens.json"))
    store.save(Tokens(access_token="a", refresh_token="r"))

    store.clear()
    store.clear()

    assert store.load() is None


def test_file_store_ignores_garbage(tmp_path):
    path = tmp_path / "tokens.json"
    path.write_text("{not json")

    assert FileTokenStore(str(path)).load() is None
