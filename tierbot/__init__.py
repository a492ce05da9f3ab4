"""
Tierbot — Points & Role Tiers for Discord Communities
=====================================================
Keeps a per-member points balance and grants/revokes tiered roles as
balances cross admin-configured thresholds.

Package layout::

    tierbot/
    ├── config.py          # YAML → typed Python config
    ├── constants.py       # Collection names, reply strings, help text
    ├── errors.py          # Per-action error taxonomy
    ├── database/
    │   ├── engine.py      # SQLAlchemy engine + async helper
    │   └── models.py      # JSON document table
    ├── engine/
    │   ├── tiers.py       # TierRule + threshold resolution
    │   ├── reconciler.py  # Held roles → role add/remove delta
    │   ├── policy.py      # Who may grant, configure, use commands
    │   ├── actions.py     # Action values + text command parser
    │   └── state.py       # Locked in-memory collections, write-through
    ├── services/
    │   ├── store.py       # Document load/save + collection codecs
    │   ├── dispatcher.py  # Action → policy gate → state → reconcile
    │   ├── role_service.py          # Applies role deltas against Discord
    │   ├── announcement_service.py  # Promotion announcements
    │   ├── embeds.py      # Embed builders
    │   └── throttle.py    # Per-channel announcement throttle
    ├── bot/
    │   ├── core.py        # Bot subclass, cog loader
    │   └── cogs/
    │       ├── text_commands.py  # !prefix commands + wrong-channel policy
    │       ├── points.py  # /points, /givepoints, /restorepoints, /showpoints, /help
    │       └── tiers.py   # /upgrade, /removeupgrade, /addpointgiver, channels
    └── api/
        ├── main.py        # FastAPI status app
        └── deps.py        # Engine / store dependencies
"""

__version__ = "0.1.0"
