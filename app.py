"""RNG Simulator (Streamlit)

Idle number-guessing game: pick a target, generate numbers, earn coins on
exact hits, spend coins on upgrades.

Principles:
- UI only renders + triggers.
- Economy, transitions and timers are pure Python modules (core/, engine/).
- Every successful transition is written through to the snapshot store.

Entry point: streamlit run app.py
"""

from __future__ import annotations

import logging
import os
from datetime import datetime, timezone
from html import escape as html_escape
from typing import Any, Callable, Dict, List, Optional

import streamlit as st

import core
from core.effects import auto_rate_per_second, base_reward, burst_cost, burst_size, chance_denominator, coin_multiplier
from core.state import GameState, RollBatch
from core.tracks import AUTO_CLICKER, COIN_MULTIPLIER, DEFAULT_TRACKS, INSTANCE_COUNT, SPEED_BURST, TRACK_ORDER
from core.views import (
    best_hit_streak,
    elapsed_seconds,
    format_number,
    format_time_played,
    hit_rate,
    largest_reward,
    total_clicks,
)
from engine.config import EngineConfig
from engine.logging import configure_logging, dumps_state_export, make_state_export
from engine.session import ClockDriver, GameSession
from storage.parsing import try_parse_json
from storage.providers import JsonFileStore
from storage.schemas import looks_like_snapshot, state_from_snapshot, unwrap_export


APP_TITLE = "RNG Simulator"
APP_SUBTITLE = "Pick a number, generate randoms, get paid on exact hits. Upgrades make it go faster."
APP_VERSION = "1.0.0"
EXPECTED_CORE_API = "core-v1-20261018"
CLOCK_REFRESH_SECONDS = EngineConfig().clock_refresh_seconds

logger = logging.getLogger(__name__)

st.set_page_config(page_title=APP_TITLE, page_icon="🎲", layout="wide", initial_sidebar_state="expanded")

CSS = """
<style>
.block-container {padding-top: 3.2rem; padding-bottom: 2rem;}
.card {
  border: 1px solid rgba(255,255,255,0.08);
  border-radius: 16px;
  padding: 14px 16px;
  background: rgba(255,255,255,0.03);
  margin-bottom: 10px;
}
.roll {
  display: inline-block;
  min-width: 44px;
  text-align: center;
  padding: 2px 8px;
  margin: 2px;
  border-radius: 8px;
  border: 1px solid rgba(255,255,255,0.10);
  font-family: monospace;
}
.roll.match {border-color: rgba(120,255,160,0.55); background: rgba(120,255,160,0.12); font-weight: 700;}
.pill {
  display: inline-block;
  padding: 2px 10px;
  border-radius: 999px;
  border: 1px solid rgba(255,255,255,0.12);
  font-size: 12px;
  opacity: .85;
}
.pill.ok {border-color: rgba(120,255,160,0.25);}
.small {font-size: 13px; opacity:.75;}
</style>
"""

st.markdown(CSS, unsafe_allow_html=True)


def bootstrap_core_or_stop() -> None:
    """Stop with a helpful message if app and core come from different builds."""
    api_ver = getattr(core, "API_VERSION", None)
    if api_ver != EXPECTED_CORE_API:
        st.error(
            "Core version does not match the app (partially updated checkout?).\n\n"
            f"Expected core: {EXPECTED_CORE_API}, found: {api_ver!r}"
        )
        st.stop()


bootstrap_core_or_stop()


# =========================
# Helpers
# =========================


def _secret_or_env(name: str) -> str:
    # Streamlit Cloud: st.secrets
    try:
        if name in st.secrets:
            return str(st.secrets[name])
    except Exception:
        # no secrets.toml at all
        pass
    # Local
    return os.getenv(name) or ""


def _engine_config() -> EngineConfig:
    cfg = EngineConfig.from_env()
    path = _secret_or_env("RNG_SIM_STATE_PATH")
    if path:
        cfg = EngineConfig(
            state_path=path,
            history_cap=cfg.history_cap,
            burst_spacing_ms=cfg.burst_spacing_ms,
            clock_refresh_seconds=cfg.clock_refresh_seconds,
            driver_tick_ms=cfg.driver_tick_ms,
            log_level=cfg.log_level,
        )
    return cfg


@st.cache_resource(show_spinner=False)
def _shared_session(cfg: EngineConfig) -> GameSession:
    """One session (and one clock thread) per state file, shared by all browser tabs."""
    configure_logging(cfg.log_level)
    session = GameSession(store=JsonFileStore(cfg.state_path), config=cfg)
    ClockDriver(session, tick_seconds=cfg.driver_tick_seconds).start()
    return session


def _session() -> GameSession:
    return st.session_state.game_session


def _fmt(n: int) -> str:
    return f"{int(n):,}"


# =========================
# Session State
# =========================


def _ensure_state() -> None:
    ss = st.session_state
    if "engine_config" not in ss:
        ss.engine_config = _engine_config()
    if "game_session" not in ss:
        ss.game_session = _shared_session(ss.engine_config)
    if "target_input" not in ss:
        ss.target_input = ss.game_session.state.target
    if "flash" not in ss:
        ss.flash = ""
    if "save_error" not in ss:
        ss.save_error = ""


# =========================
# Callbacks
# =========================


def _guarded(action: Callable[[], Any]) -> Optional[Any]:
    """Run a saving session action; a failed save is reported on the next render."""
    try:
        return action()
    except OSError as e:
        logger.error("could not save the game: %s", e)
        st.session_state.save_error = f"Could not save the game: {e}"
        return None


def _on_target_change() -> None:
    ss = st.session_state
    session = _session()
    log = _guarded(lambda: session.set_target(ss.target_input))
    # show the sanitized (or, on failure, the unchanged) value back in the box
    ss.target_input = log["target"] if log else session.state.target


def _on_roll() -> None:
    _guarded(_session().manual_roll)


def _on_toggle_auto() -> None:
    _guarded(_session().toggle_auto_clicker)


def _on_buy(track: str) -> None:
    log = _guarded(lambda: _session().purchase_upgrade(track))
    if log is not None and not log.get("ok"):
        st.session_state.flash = f"Not enough coins for {DEFAULT_TRACKS[track].label} ({log.get('cost')} needed)."


def _on_burst() -> None:
    log = _guarded(_session().speed_burst)
    if log is not None and not log.get("ok") and log.get("reason") == "insufficient_funds":
        st.session_state.flash = f"Speed Burst costs {log.get('cost')} coins."


# =========================
# UI Pieces
# =========================


def show_save_error() -> None:
    ss = st.session_state
    if ss.save_error:
        st.error(ss.save_error)
        ss.save_error = ""


def render_target_section(state: GameState) -> None:
    st.markdown("### Set Target Number")
    st.text_input(
        "Target",
        key="target_input",
        on_change=_on_target_change,
        placeholder="Enter target number...",
        label_visibility="collapsed",
    )
    if state.has_target:
        lo, hi = state.draw_range
        st.markdown(
            f"<div class='small'>Range: {format_number(lo, state.target)} - {format_number(hi, state.target)}<br/>"
            f"Base Reward: {base_reward(state.target_length)} coins<br/>"
            f"Chance: 1 in {_fmt(chance_denominator(state.target_length))}</div>",
            unsafe_allow_html=True,
        )


def render_controls(session: GameSession, state: GameState) -> None:
    ups = state.upgrades
    price = burst_cost(state.target_length)
    a, b, c = st.columns(3)
    with a:
        st.button(
            f"Generate Numbers ({ups.instance_count.level}x)",
            disabled=not state.has_target,
            on_click=_on_roll,
            use_container_width=True,
            type="primary",
        )
    with b:
        st.button(
            f"Speed Burst (Lvl {ups.speed_burst.level}) · {price} coins",
            disabled=not state.has_target or state.coins < price,
            on_click=_on_burst,
            use_container_width=True,
        )
        if session.pending_burst_draws:
            st.caption(f"Burst in flight: {session.pending_burst_draws} draws left")
    with c:
        label = "ON" if session.auto_enabled else "OFF"
        st.button(
            f"Auto-Clicker: {label} (Lvl {ups.auto_clicker.level})",
            disabled=ups.auto_clicker.level == 0,
            on_click=_on_toggle_auto,
            use_container_width=True,
        )


def _effect_line(track: str, state: GameState) -> str:
    level = state.upgrades.get(track).level
    if track == INSTANCE_COUNT:
        return f"Numbers per click: {level}"
    if track == AUTO_CLICKER:
        return f"Speed: {auto_rate_per_second(level):.1f}/sec"
    if track == COIN_MULTIPLIER:
        return f"Multiplier: {coin_multiplier(level):g}x"
    if track == SPEED_BURST:
        return f"Clicks: {burst_size(level)}"
    return ""


def render_shop(state: GameState) -> None:
    st.markdown("### Upgrades Shop")
    cols = st.columns(len(TRACK_ORDER))
    for col, track in zip(cols, TRACK_ORDER):
        spec = DEFAULT_TRACKS[track]
        up = state.upgrades.get(track)
        with col:
            st.markdown(f"#### {spec.label}")
            st.caption(spec.desc)
            st.markdown(f"Level: **{up.level}**  \n{_effect_line(track, state)}")
            st.button(
                f"Buy - {_fmt(up.cost)} coins",
                key=f"buy_{track}",
                disabled=state.coins < up.cost,
                on_click=_on_buy,
                args=(track,),
                use_container_width=True,
            )


def _batch_html(batch: RollBatch, target: str) -> str:
    when = datetime.fromtimestamp((batch.timestamp or 0) / 1000).strftime("%H:%M:%S")
    head = f"<span class='small'>{when}{' (Auto)' if batch.is_auto else ''}</span> "
    if batch.hits > 0:
        head += f"<span class='pill ok'>{batch.hits} hit{'s' if batch.hits != 1 else ''}</span> "
    if batch.total_coins > 0:
        head += f"<span class='pill ok'>+{batch.total_coins} coins</span>"
    rolls: List[str] = []
    for r in batch.rolls:
        cls = "roll match" if r.is_match else "roll"
        badge = f" +{r.reward}" if r.is_match else ""
        rolls.append(f"<span class='{cls}'>{html_escape(format_number(r.number, target))}{badge}</span>")
    return f"<div class='card'>{head}<br/>{''.join(rolls)}</div>"


def render_history(state: GameState) -> None:
    st.markdown("### Recent Rolls")
    if not state.history:
        st.info("No rolls yet. Start generating numbers!")
        return
    html = "".join(_batch_html(b, state.target) for b in state.history)
    st.markdown(html, unsafe_allow_html=True)


# =========================
# UI Pages
# =========================


@st.fragment(run_every=CLOCK_REFRESH_SECONDS)
def live_game_panel() -> None:
    session = _session()
    state = session.state

    show_save_error()
    st.metric("Coins", _fmt(state.coins))
    if st.session_state.flash:
        st.warning(st.session_state.flash)
        st.session_state.flash = ""

    render_controls(session, state)
    st.markdown("---")
    render_shop(state)
    st.markdown("---")
    render_history(state)


@st.fragment(run_every=CLOCK_REFRESH_SECONDS)
def live_statistics_panel() -> None:
    state = _session().state
    s = state.stats

    rows = [
        ("Time Played", format_time_played(elapsed_seconds(state))),
        ("Total Clicks", _fmt(total_clicks(state))),
        ("Manual Clicks", _fmt(s.manual_clicks)),
        ("Auto Clicks", _fmt(s.auto_clicks)),
        ("Total Numbers Generated", _fmt(s.total_numbers_generated)),
        ("Total Hits", _fmt(s.total_hits)),
        ("Hit Rate", f"{hit_rate(state):.2f}%"),
        ("Total Coins Earned", _fmt(s.total_coins_earned)),
        ("Upgrades Purchased", _fmt(s.upgrades_purchased)),
        ("Current Coins", _fmt(state.coins)),
        ("Largest Reward", f"{_fmt(largest_reward(state.history))} coins"),
        ("Best Hit Streak", _fmt(best_hit_streak(state.history))),
    ]
    for i in range(0, len(rows), 4):
        cols = st.columns(4)
        for col, (label, value) in zip(cols, rows[i : i + 4]):
            col.metric(label, value)


def page_game() -> None:
    st.title(APP_TITLE)
    st.caption(APP_SUBTITLE)
    render_target_section(_session().state)
    st.markdown("---")
    live_game_panel()


def page_statistics() -> None:
    st.title("All-Time Statistics")
    st.caption("Largest reward and best streak cover the recent-rolls window only.")
    live_statistics_panel()


def export_import_controls() -> None:
    ss = st.session_state
    session = _session()
    st.sidebar.markdown("---")
    st.sidebar.markdown("### Save Export / Import")

    export_payload: Dict[str, Any] = make_state_export(
        state=session.state,
        app=APP_TITLE,
        version=APP_VERSION,
        exported_at=datetime.now(timezone.utc).isoformat(),
    )
    st.sidebar.download_button(
        "Download save",
        data=dumps_state_export(export_payload).encode("utf-8"),
        file_name="rng_simulator_save.json",
        mime="application/json",
    )

    up = st.sidebar.file_uploader("Load save", type=["json"], accept_multiple_files=False)
    if up is not None and ss.get("last_import") != up.file_id:
        res = try_parse_json(up.read().decode("utf-8", errors="replace"))
        data = unwrap_export(res.data) if res.data is not None else {}
        if not data or not looks_like_snapshot(data):
            st.sidebar.error(f"Import failed: {res.error or 'not a game save'}")
        else:
            ss.last_import = up.file_id
            imported = state_from_snapshot(data, history_cap=ss.engine_config.history_cap)
            try:
                session.replace_state(imported)
            except OSError as e:
                logger.error("could not save the imported game: %s", e)
                st.sidebar.error(f"Could not save the imported game: {e}")
                return
            ss.target_input = session.state.target
            st.sidebar.success("Save loaded.")
            st.rerun()


def sidebar() -> str:
    ss = st.session_state
    session = _session()

    st.sidebar.markdown(f"**{APP_TITLE}**  ")
    st.sidebar.markdown(f"v{APP_VERSION}")

    st.sidebar.markdown("---")
    page = st.sidebar.radio("Tab", ["Game", "Statistics"], index=0)

    status = session.store.status() if session.store is not None else None
    if status is not None:
        if status.ok:
            st.sidebar.caption(f"Saving to {status.location} ({status.note})")
        else:
            st.sidebar.error(f"Save location unusable: {status.error}")

    export_import_controls()

    st.sidebar.markdown("---")
    if st.sidebar.button("Reset game", use_container_width=True):
        try:
            session.reset()
        except OSError as e:
            logger.error("could not clear the save: %s", e)
            st.sidebar.error(f"Could not reset the save: {e}")
        else:
            ss.target_input = ""
            st.rerun()
    return page


# =========================
# Main
# =========================


def main() -> None:
    _ensure_state()
    page = sidebar()

    show_save_error()
    if page == "Game":
        page_game()
    else:
        page_statistics()


if __name__ == "__main__":
    main()
