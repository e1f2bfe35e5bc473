from __future__ import annotations

import streamlit as st


# ---------------------- SUBMIT GUARD ----------------------
# Set from a submit button's on_click, which runs before the script body, so
# the button is drawn disabled before the request starts. A second click
# cannot reach the backend until release_submit() and the following rerun.

def _flag(name: str) -> str:
    return f"{name}-submitting"


def hold_submit(name: str) -> None:
    st.session_state[_flag(name)] = True


def is_submitting(name: str) -> bool:
    return bool(st.session_state.get(_flag(name)))


def release_submit(name: str) -> None:
    st.session_state.pop(_flag(name), None)
