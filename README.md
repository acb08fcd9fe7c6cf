# kubehop

A library of building blocks for a tool that switches between Kubernetes
contexts spread over many kubeconfig files. It reads, migrates and validates
the switch configuration file, keeps per-store search indexes and hook state
on disk, resolves kubeconfig paths from flags and the environment, and offers
helpers for exporting a landscape of cluster kubeconfigs into a directory tree.

## Installation

```
pip install kubehop
```

For running the tests:

```
pip install "kubehop[test]"
pytest
```

## Modules

- `kubehop.config` – the data classes `Config`, `ConfigOld`,
  `KubeconfigStore`, `KubeconfigPath` and `Hook`, the enums `StoreKind` and
  `HookType`, and:
  - `load_config_from_file(filepath)` – returns `None` when the file does not
    exist and an empty `Config` when it is empty. A file without `version` and
    without `kubeconfigStores` is read as the old format and migrated in place
    (see `migrate_config`). Unreadable content raises `ConfigError`.
  - `migrate_config(old, filename)` – writes the old configuration to
    `<filename>.old` and the converted one to `<filename>`.
  - `convert_configuration(old)` – turns a `ConfigOld` into a `Config` of kind
    `SwitchConfig`, version `v1alpha1`, with one `filesystem` and one `vault`
    store (both with ID `default`) for the paths that exist.
  - `config_from_dict` / `config_to_dict` and `old_config_from_dict` /
    `old_config_to_dict` – conversion to and from plain YAML data.
  - `parse_duration` / `format_duration` – durations such as `1h30m`, `10s`,
    `500ms` to and from `datetime.timedelta`.
- `kubehop.validation` – `validate_config(config)` returns a list of
  `FieldError` (with `type`, `field`, `bad_value`, `detail`), empty when the
  configuration is valid. `ErrorType` is `INVALID`, `REQUIRED` or `FORBIDDEN`.
  It checks the version, store kinds, that `filesystem` and `vault` stores have
  paths, that stores of the same kind have unique IDs when an index is used
  (a Gardener store's `landscapeName` serves as its default ID), and hook
  types, executable paths and inline-command arguments.
- `kubehop.index` – `SearchIndex(store_kind, state_directory, store_id)` keeps
  `switch.<id>.index` and `switch.<id>.index.state` in the state directory
  (created if missing). It offers `has_content`, `has_kind`, `get_content`,
  `should_be_used(config, store_refresh_index_after)`, `write(Index)`,
  `write_state(IndexState)` and `delete`. Corrupt files raise `IndexFileError`.
- `kubehop.state` – `get_hook_state(path)` returns a `HookState` or `None` when
  the file does not exist; `update_hook_state(hook_name, path)` records the
  current time. Unparsable files raise `StateError`.
- `kubehop.landscape` – `FileStore` (`get_kind`,
  `create_landscape_directory`, `write_kubeconfig_file`,
  `clean_existing_kubeconfigs`), `get_previous_identifiers(search_index,
  landscape)`, `is_shooted_seed(namespace, annotations)` and the naming helpers
  `secret_identifier`, `shoot_identifier`, `shoot_kubeconfig_directory`,
  `seed_identifier` and `seed_kubeconfig_directory`.
- `kubehop.paths` – `expand_path`, `is_duplicate_path`,
  `kubeconfig_path_from_flag` and `store_from_flag_and_env`, which turns the
  `--kubeconfig-path` value and the `KUBECONFIG` variable into an extra store
  with ID `env-and-flag` (skipping `.tmp` paths and paths already configured).
  Each accepts an optional `environ` mapping in place of `os.environ`.
- `kubehop.commands` – `resolve_command(argv, known_commands=None)` routes a
  bare context name to `set-context`, `-` to `set-previous-context` and `.` to
  `set-last-context`; `parse_alias_argument(args)` splits `ALIAS=CONTEXT_NAME`
  or raises `UsageError`; `version_text(version, build_date)` renders version
  information.

## Usage

```python
from kubehop.config import load_config_from_file
from kubehop.validation import validate_config

config = load_config_from_file("/home/me/.kube/switch-config.yaml")
if config is not None:
    for error in validate_config(config):
        print(error)
```

Convert an old-style configuration without touching any file:

```python
from kubehop.config import old_config_from_dict, convert_configuration, config_to_dict

old = old_config_from_dict({
    "kubeconfigName": "config",
    "kubeconfigPaths": [{"path": "~/.kube", "store": "filesystem"}],
})
print(config_to_dict(convert_configuration(old)))
```

Read a store's search index:

```python
from kubehop.config import StoreKind
from kubehop.index import SearchIndex

index = SearchIndex(StoreKind.FILESYSTEM, "/home/me/.kube/switch-state", "default")
if index.has_content() and index.has_kind(StoreKind.FILESYSTEM):
    for context, path in index.get_content().items():
        print(context, path)
```

## What this package does not do

- It installs no command. `kubehop.commands` only routes arguments and renders
  text; nothing here switches contexts, lists them, changes namespaces or runs
  hooks.
- It does not search kubeconfig stores, offer a fuzzy-selection screen, or
  write temporary kubeconfig files.
- It does not talk to Vault, Gardener, GKE, Azure or EKS. `FileStore` is the
  only landscape store, and no code lists clusters or secrets from an API.
- `validate_config` does not check the store-specific settings of Gardener or
  GKE stores (such as their paths or `config` contents).