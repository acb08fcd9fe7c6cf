from datetime import timedelta

import pytest
import yaml

from kubehop.config import (
    Config,
    ConfigError,
    ConfigOld,
    Hook,
    HookType,
    KubeconfigPath,
    KubeconfigStore,
    StoreKind,
    config_from_dict,
    config_to_dict,
    convert_configuration,
    format_duration,
    load_config_from_file,
    migrate_config,
    old_config_from_dict,
    old_config_to_dict,
    parse_duration,
)


def test_migrate_empty_config():
    assert convert_configuration(ConfigOld()) == Config(kind="SwitchConfig", version="v1alpha1")


def test_migrate_config_with_multiple_paths():
    refresh = timedelta(seconds=10)
    hooks = [Hook(name="name", type="type", path="my-path")]
    expected = Config(
        kind="SwitchConfig",
        version="v1alpha1",
        kubeconfig_name="name",
        refresh_index_after=refresh,
        hooks=hooks,
        kubeconfig_stores=[
            KubeconfigStore(id="default", kind=StoreKind.FILESYSTEM, paths=["path", "other-path"]),
            KubeconfigStore(
                id="default",
                kind=StoreKind.VAULT,
                paths=["path", "other-path"],
                config={"vaultAPIAddress": "vault-api"},
            ),
        ],
    )
    old = ConfigOld(
        kubeconfig_name="name",
        kubeconfig_rediscovery_interval=refresh,
        vault_api_address="vault-api",
        hooks=hooks,
        kubeconfig_paths=[
            KubeconfigPath(path="path", store=StoreKind.FILESYSTEM),
            KubeconfigPath(path="other-path", store=StoreKind.FILESYSTEM),
            KubeconfigPath(path="path", store=StoreKind.VAULT),
            KubeconfigPath(path="other-path", store=StoreKind.VAULT),
        ],
    )
    assert convert_configuration(old) == expected


def test_migrate_only_vault_paths_yields_single_store():
    old = ConfigOld(kubeconfig_paths=[KubeconfigPath(path="secret/a", store=StoreKind.VAULT)])
    result = convert_configuration(old)
    assert [store.kind for store in result.kubeconfig_stores] == [StoreKind.VAULT]
    assert result.kubeconfig_stores[0].config is None


@pytest.mark.parametrize(
    "text, expected",
    [
        ("10s", timedelta(seconds=10)),
        ("1h30m", timedelta(hours=1, minutes=30)),
        ("1.5s", timedelta(seconds=1.5)),
        ("-2m", timedelta(minutes=-2)),
        ("500ms", timedelta(milliseconds=500)),
        ("0", timedelta(0)),
    ],
)
def test_parse_duration(text, expected):
    assert parse_duration(text) == expected


@pytest.mark.parametrize("text", ["", "abc", "10", "5x", "1h-"])
def test_parse_duration_rejects_garbage(text):
    with pytest.raises(ConfigError):
        parse_duration(text)


@pytest.mark.parametrize(
    "value, expected",
    [
        (timedelta(0), "0s"),
        (timedelta(seconds=10), "10s"),
        (timedelta(hours=1), "1h0m0s"),
        (timedelta(minutes=1), "1m0s"),
        (timedelta(seconds=1.5), "1.5s"),
        (timedelta(milliseconds=500), "500ms"),
        (timedelta(minutes=-2), "-2m0s"),
    ],
)
def test_format_duration(value, expected):
    assert format_duration(value) == expected


def test_config_dict_round_trip():
    config = Config(
        kind="SwitchConfig",
        version="v1alpha1",
        kubeconfig_name="cfg",
        show_preview=False,
        refresh_index_after=timedelta(hours=2),
        hooks=[Hook(name="sync", type=HookType.INLINE_COMMAND, arguments=["a", "b"], interval=timedelta(minutes=5))],
        kubeconfig_stores=[
            KubeconfigStore(kind=StoreKind.FILESYSTEM, id="home", paths=["~/.kube"], required=False, show_prefix=True),
        ],
    )
    assert config_from_dict(config_to_dict(config)) == config


def test_old_config_dict_round_trip():
    old = ConfigOld(
        kubeconfig_name="cfg",
        kubeconfig_rediscovery_interval=timedelta(minutes=3),
        vault_api_address="vault-api",
        kubeconfig_paths=[KubeconfigPath(path="p", store=StoreKind.VAULT)],
    )
    assert old_config_from_dict(old_config_to_dict(old)) == old


def test_config_from_dict_rejects_wrong_types():
    with pytest.raises(ConfigError):
        config_from_dict({"kubeconfigStores": "not-a-list"})


def test_load_missing_file_returns_none(tmp_path):
    assert load_config_from_file(tmp_path / "missing.yaml") is None


def test_load_empty_file_returns_empty_config(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("")
    assert load_config_from_file(path) == Config()


def test_load_current_format(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "kind: SwitchConfig\n"
        "version: v1alpha1\n"
        "refreshIndexAfter: 1h\n"
        "kubeconfigStores:\n"
        "- kind: vault\n"
        "  paths: [secret/a]\n"
    )
    config = load_config_from_file(path)
    assert config.version == "v1alpha1"
    assert config.refresh_index_after == timedelta(hours=1)
    assert config.kubeconfig_stores == [KubeconfigStore(kind=StoreKind.VAULT, paths=["secret/a"])]


def test_load_old_format_migrates_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "kubeconfigName: cfg\n"
        "kubeconfigPaths:\n"
        "- path: /home/kube\n"
        "  store: filesystem\n"
    )
    config = load_config_from_file(path)
    expected = Config(
        kind="SwitchConfig",
        version="v1alpha1",
        kubeconfig_name="cfg",
        kubeconfig_stores=[KubeconfigStore(id="default", kind=StoreKind.FILESYSTEM, paths=["/home/kube"])],
    )
    assert config == expected
    backup = yaml.safe_load((tmp_path / "config.yaml.old").read_text())
    assert backup["kubeconfigName"] == "cfg"
    assert load_config_from_file(path) == expected


def test_migrate_config_writes_both_files(tmp_path):
    path = tmp_path / "switch.yaml"
    old = ConfigOld(vault_api_address="vault-api", kubeconfig_paths=[KubeconfigPath(path="s", store=StoreKind.VAULT)])
    new = migrate_config(old, path)
    assert yaml.safe_load(path.read_text()) == config_to_dict(new)
    assert yaml.safe_load((tmp_path / "switch.yaml.old").read_text()) == old_config_to_dict(old)


def test_load_unparseable_file_raises(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("- a\n- b\n")
    with pytest.raises(ConfigError, match="could not unmarshal config"):
        load_config_from_file(path)