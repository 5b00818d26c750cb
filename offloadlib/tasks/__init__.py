"""
Higher-level methods to reconcile an interface with its desired offload settings.

Each public function in this module should:

- perform a complete task, as needed by a script or user action
- probe current state before acting, and avoid non-idempotent calls unless required by a prior
  state change
- create and manage clients for any resources needed by plumbing, unless given them by the caller
"""
