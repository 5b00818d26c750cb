"""
Low-level APIs for fine-grained offload and unit management.

Each public function in this module should:

- perform a single action, idempotently if possible
- raise an exception on any failures, unless documented as non-fatal
- accept client objects (`Ethtool`, `Systemctl`) as arguments rather than creating their own

Each function also falls into one of two groups:

- getters (prefixed with `get_`, `is_`, `count_` or `list_`, returns a value directly, does not
  modify state)
- actions (returns a `Result` object, may modify state)
"""
