import pytest

from kubehop.config import Config, KubeconfigStore, StoreKind
from kubehop.paths import (
    DEFAULT_KUBECONFIG_PATH,
    expand_path,
    is_duplicate_path,
    kubeconfig_path_from_flag,
    store_from_flag_and_env,
)


@pytest.fixture
def home(tmp_path):
    return tmp_path / "home"


@pytest.fixture
def env(home):
    return {"HOME": str(home), "NAME": "cluster"}


def test_expand_path_replaces_tilde(env, home):
    assert expand_path("~/kube/cfg", env) == f"{home}/kube/cfg"


def test_expand_path_plain_and_braced_variables(env, home):
    assert expand_path("$HOME/${NAME}-x", env) == f"{home}/cluster-x"


def test_expand_path_unset_variable_is_empty(env):
    assert expand_path("/a/$MISSING/b", env) == "/a//b"


def test_expand_path_keeps_trailing_dollar_and_unknown_syntax(env):
    assert expand_path("/a/b$", env) == "/a/b$"
    assert expand_path("/a/$/b", env) == "/a/$/b"


def test_expand_path_without_variables_is_unchanged(env):
    assert expand_path("/etc/kube/config", env) == "/etc/kube/config"


def test_is_duplicate_path():
    stores = [
        KubeconfigStore(kind=StoreKind.FILESYSTEM, paths=["a", "b"]),
        KubeconfigStore(kind=StoreKind.VAULT, paths=["c"]),
    ]
    assert is_duplicate_path(stores, "c") is True
    assert is_duplicate_path(stores, "b") is True
    assert is_duplicate_path(stores, "d") is False
    assert is_duplicate_path([], "a") is False


def test_flag_empty_gives_no_path(env):
    assert kubeconfig_path_from_flag("", env) == ""


def test_flag_default_path_missing_gives_no_path(env):
    assert kubeconfig_path_from_flag(DEFAULT_KUBECONFIG_PATH, env) == ""


def test_flag_default_path_existing(env, home):
    target = home / ".kube" / "config"
    target.parent.mkdir(parents=True)
    target.write_text("apiVersion: v1\n")
    assert kubeconfig_path_from_flag(DEFAULT_KUBECONFIG_PATH, env) == str(target)
    assert kubeconfig_path_from_flag("~/.kube/config", env) == str(target)


def test_flag_non_default_path_is_expanded_without_existence_check(env, home):
    assert kubeconfig_path_from_flag("~/elsewhere/cfg", env) == f"{home}/elsewhere/cfg"


def test_store_none_without_flag_or_env(env):
    assert store_from_flag_and_env(Config(), "", environ=env) is None


def test_store_from_env_filters_tmp_empty_and_duplicates(env, home):
    environ = dict(env, KUBECONFIG="::/x/a.tmp:/configured:~/one:/two")
    config = Config(kubeconfig_stores=[KubeconfigStore(kind=StoreKind.FILESYSTEM, paths=["/configured"])])
    store = store_from_flag_and_env(config, "", "config", "filesystem", environ)
    assert store.paths == [f"{home}/one", "/two"]
    assert store.id == "env-and-flag"
    assert store.kind == StoreKind.FILESYSTEM
    assert store.kubeconfig_name == "config"
    assert store.show_prefix is False


def test_store_flag_path_comes_first(env):
    environ = dict(env, KUBECONFIG="/from-env")
    store = store_from_flag_and_env(Config(), "/from-flag", "config", "vault", environ)
    assert store.paths == ["/from-flag", "/from-env"]
    assert store.kind == StoreKind.VAULT


def test_store_keeps_unknown_backend_text(env):
    store = store_from_flag_and_env(Config(), "/p", "kc", "custom", env)
    assert store.kind == "custom"
    assert store.kubeconfig_name == "kc"


def test_store_only_tmp_in_env_gives_none(env):
    environ = dict(env, KUBECONFIG="/a.tmp")
    assert store_from_flag_and_env(Config(), "", environ=environ) is None