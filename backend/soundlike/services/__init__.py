"""Services Layer — the imperative shell around core/ rules.

Invariants:
    - Every multi-statement mutation runs inside one DatabaseSessionManager.transaction()
    - Filesystem calls happen strictly before (upload) or strictly after (deletion)
      a transaction, never inside one
    - Side effects (fanout) are scheduled only after commit
"""
