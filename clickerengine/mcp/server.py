"""MCP server wrapping a GameSession for interactive AI playtesting."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any

from mcp.server.fastmcp import FastMCP

from clickerengine.boost import Boost, BoostKind
from clickerengine.cache import MemoryCache
from clickerengine.catalog import UpgradeCatalog
from clickerengine.config import EngineConfig
from clickerengine.persistence import InMemoryBackend, PlayerRecord
from clickerengine.session import GameSession
from clickerengine.simulation import ManualClock

# Maximum seconds per wait() call (24 hours)
_MAX_WAIT = 86400
# Maximum clicks per click() call
_MAX_CLICKS = 1000
_PLAYER_ID = "playtester"


@dataclass
class _SessionHolder:
    """Holds the catalog, the fake backend and the live session."""

    catalog: UpgradeCatalog
    config: EngineConfig
    backend: InMemoryBackend
    cache: MemoryCache
    clock: ManualClock
    session: GameSession
    _boost_seq: int = field(default=0)

    @classmethod
    def create(cls, catalog: UpgradeCatalog, config: EngineConfig | None = None) -> _SessionHolder:
        config = config or EngineConfig()
        clock = ManualClock()
        backend = InMemoryBackend(players=[PlayerRecord(id=_PLAYER_ID, username=_PLAYER_ID)])
        cache = MemoryCache()
        holder = cls(
            catalog=catalog,
            config=config,
            backend=backend,
            cache=cache,
            clock=clock,
            session=_new_session(catalog, config, backend, cache, clock),
        )
        return holder


def _new_session(
    catalog: UpgradeCatalog,
    config: EngineConfig,
    backend: InMemoryBackend,
    cache: MemoryCache,
    clock: ManualClock,
) -> GameSession:
    return GameSession(
        player_id=_PLAYER_ID,
        catalog=catalog,
        backend=backend,
        cache=cache,
        config=config,
        clock=clock,
        wall_clock=clock.wall,
    )


# ── Tool logic functions (testable without MCP protocol) ────────────


async def _ensure_loaded(holder: _SessionHolder) -> None:
    if not holder.session.loaded:
        await holder.session.load()
        await holder.session.refresh_boosts()


def _tool_get_catalog(holder: _SessionHolder) -> dict[str, Any]:
    state = holder.session.state
    return {
        "name": holder.config.name,
        "upgrades": [
            {
                "id": u.id,
                "display_name": u.display_name,
                "cpc_bonus": u.cpc_bonus,
                "cps_bonus": u.cps_bonus,
                "owned": state.count(u.id),
                "next_cost": holder.catalog.cost_of(u.id, state.count(u.id)),
            }
            for u in holder.catalog
        ],
    }


def _tool_get_state(holder: _SessionHolder) -> dict[str, Any]:
    session = holder.session
    rates = session.rates()
    boosts = session.active_boosts()
    return {
        "time_elapsed": round(holder.clock.now, 2),
        "balance": round(session.state.balance, 2),
        "cookies_per_click": rates.cpc,
        "cookies_per_second": rates.cps,
        "upgrades": dict(session.state.upgrade_counts),
        "active_boosts": len(boosts),
        "click_multiplier": boosts.click_multiplier,
        "cps_multiplier": boosts.cps_multiplier,
        "bonus_cookies": boosts.bonus_flat,
        "degraded": session.degraded,
    }


def _tool_click(holder: _SessionHolder, count: int = 1) -> dict[str, Any]:
    if count < 1:
        return {"error": "Count must be at least 1"}
    if count > _MAX_CLICKS:
        return {"error": f"Count cannot exceed {_MAX_CLICKS}"}

    total = 0
    for _ in range(count):
        total += holder.session.click()
    return {
        "clicks": count,
        "total_earned": total,
        "new_balance": round(holder.session.state.balance, 2),
    }


def _tool_purchase(holder: _SessionHolder, upgrade_id: str) -> dict[str, Any]:
    if holder.catalog.get(upgrade_id) is None:
        return {"error": f"Unknown upgrade: {upgrade_id!r}"}

    result = holder.session.try_purchase(upgrade_id)
    if result.success:
        return {
            "success": True,
            "upgrade_id": upgrade_id,
            "cost": result.cost,
            "new_count": result.new_count,
        }
    return {"success": False, "reason": result.reason, "cost": result.cost}


def _tool_wait(holder: _SessionHolder, seconds: float) -> dict[str, Any]:
    if seconds <= 0:
        return {"error": "Seconds must be positive"}
    if seconds > _MAX_WAIT:
        return {"error": f"Cannot wait more than {_MAX_WAIT} seconds (24h) per call"}

    # Subdivide into ticks so expiring boosts are noticed on time
    earned = 0.0
    remaining = seconds
    while remaining > 0:
        dt = min(holder.config.tick_interval, remaining)
        holder.clock.advance(dt)
        earned += holder.session.tick()
        remaining -= dt

    return {
        "waited": seconds,
        "earned": round(earned, 2),
        "time_elapsed": round(holder.clock.now, 2),
        "balance": round(holder.session.state.balance, 2),
    }


async def _tool_add_boost(
    holder: _SessionHolder, kind: str, factor: float, duration: float
) -> dict[str, Any]:
    try:
        boost_kind = BoostKind(kind)
    except ValueError:
        return {"error": f"Unknown boost kind: {kind!r}. Expected one of {[k.value for k in BoostKind]}"}
    if duration <= 0:
        return {"error": "Duration must be positive"}
    if factor < 0:
        return {"error": "Factor must not be negative"}

    holder._boost_seq += 1
    boost = Boost(
        id=f"boost-{holder._boost_seq}",
        kind=boost_kind,
        factor=factor,
        expires_at=holder.clock.wall() + timedelta(seconds=duration),
    )
    holder.backend.boosts.append(boost)
    await holder.session.refresh_boosts()
    return {"success": True, "boost": boost.to_record()}


def _tool_list_boosts(holder: _SessionHolder) -> dict[str, Any]:
    now = holder.clock.wall()
    return {
        "boosts": [
            {**b.to_record(), "active": b.is_active(now)}
            for b in holder.session.boosts
        ]
    }


async def _tool_reload(holder: _SessionHolder) -> dict[str, Any]:
    """End the session as a page unload would, then start a new one."""
    await holder.session.close()
    holder.session = _new_session(
        holder.catalog, holder.config, holder.backend, holder.cache, holder.clock
    )
    result = await holder.session.load()
    await holder.session.refresh_boosts()
    if result is None:
        return {"success": False, "reason": "Backend unavailable"}
    return {
        "success": True,
        "balance": round(result.state.balance, 2),
        "server_was_stale": result.must_persist,
    }


def _tool_new_game(holder: _SessionHolder) -> dict[str, Any]:
    holder.backend.players[_PLAYER_ID] = PlayerRecord(id=_PLAYER_ID, username=_PLAYER_ID)
    holder.cache.delete(holder.config.cache_key(_PLAYER_ID))
    holder.session = _new_session(
        holder.catalog, holder.config, holder.backend, holder.cache, holder.clock
    )
    return {"success": True, "message": "Game reset to initial state"}


# ── Server factory ──────────────────────────────────────────────────


def create_server(catalog: UpgradeCatalog, config: EngineConfig | None = None) -> FastMCP:
    """Create an MCP server wrapping a GameSession for the given catalog."""
    holder = _SessionHolder.create(catalog, config)

    mcp = FastMCP(
        name=f"clickerengine: {holder.config.name}",
    )

    @mcp.tool()
    async def get_catalog() -> dict[str, Any]:
        """List upgrades with their bonuses, owned counts and next cost."""
        await _ensure_loaded(holder)
        return _tool_get_catalog(holder)

    @mcp.tool()
    async def get_state() -> dict[str, Any]:
        """Current balance, effective rates, owned upgrades and boost factors."""
        await _ensure_loaded(holder)
        return _tool_get_state(holder)

    @mcp.tool()
    async def click(count: int = 1) -> dict[str, Any]:
        """Click the cookie N times (max 1000). Returns total earned."""
        await _ensure_loaded(holder)
        return _tool_click(holder, count)

    @mcp.tool()
    async def purchase(upgrade_id: str) -> dict[str, Any]:
        """Buy one unit of an upgrade. Returns success/failure with reason."""
        await _ensure_loaded(holder)
        return _tool_purchase(holder, upgrade_id)

    @mcp.tool()
    async def wait(seconds: float) -> dict[str, Any]:
        """Advance game time by the given seconds (max 86400)."""
        await _ensure_loaded(holder)
        return _tool_wait(holder, seconds)

    @mcp.tool()
    async def add_boost(kind: str, factor: float, duration: float) -> dict[str, Any]:
        """Create a global boost: click_multiplier, cps_multiplier or bonus_cookies."""
        await _ensure_loaded(holder)
        return await _tool_add_boost(holder, kind, factor, duration)

    @mcp.tool()
    async def list_boosts() -> dict[str, Any]:
        """List known boosts and whether each is still active."""
        await _ensure_loaded(holder)
        return _tool_list_boosts(holder)

    @mcp.tool()
    async def reload() -> dict[str, Any]:
        """Simulate a page reload: save on exit, then reconcile on load."""
        await _ensure_loaded(holder)
        return await _tool_reload(holder)

    @mcp.tool()
    async def new_game() -> dict[str, Any]:
        """Reset the player to an empty state."""
        return _tool_new_game(holder)

    return mcp
