"""
Solar Thermal Loop: Live Streamlit Dashboard

Run with:
    streamlit run app.py
"""

import time

import numpy as np
import streamlit as st
import plotly.graph_objects as go
from plotly.subplots import make_subplots

from solar_loop.simulation import SolarThermalSimulation, SimulationSnapshot


# ─────────────────────────────────────────────────────────────────────────────
# PAGE CONFIG
# ─────────────────────────────────────────────────────────────────────────────
st.set_page_config(
    page_title="Solar Thermal Loop",
    page_icon="☀️",
    layout="wide",
    initial_sidebar_state="expanded",
)

# ─────────────────────────────────────────────────────────────────────────────
# COLOUR PALETTE
# ─────────────────────────────────────────────────────────────────────────────
C = dict(
    tank_top    = "#e74c3c",
    tank_bottom = "#9b59b6",
    collector   = "#f39c12",
    outdoor     = "#3498db",
    irr_line    = "#f1c40f",
    pump_on     = "#27ae60",
    pump_off    = "#95a5a6",
)

TEMPLATE = "plotly_white"
REFRESH_S = 0.5


# ─────────────────────────────────────────────────────────────────────────────
# SIMULATION HANDLE (one per browser session)
# ─────────────────────────────────────────────────────────────────────────────
if "sim" not in st.session_state:
    st.session_state["sim"] = SolarThermalSimulation()

sim: SolarThermalSimulation = st.session_state["sim"]


# ─────────────────────────────────────────────────────────────────────────────
# SIDEBAR: CONTROLS
# ─────────────────────────────────────────────────────────────────────────────
with st.sidebar:
    st.title("⚙️ Controls")

    s: SimulationSnapshot = sim.snapshot

    c1, c2 = st.columns(2)
    if s.is_running:
        if c1.button("⏸  Pause", use_container_width=True):
            sim.pause()
    else:
        if c1.button("▶  Start", type="primary", use_container_width=True):
            sim.start()
    if c2.button("↺  Reset", use_container_width=True):
        sim.reset()

    s = sim.snapshot
    speed = st.slider("Speed (×)", 1, 1000, int(s.speed_multiplier), 1,
                      help="Simulated seconds per real second")
    if speed != int(s.speed_multiplier):
        sim.set_speed(speed)

    st.markdown("---")
    st.subheader("🔧 Pump")
    s = sim.snapshot
    auto = st.toggle("Automatic control", value=s.pump_automatic)
    if auto != s.pump_automatic:
        sim.toggle_automatic_control()

    s = sim.snapshot
    if not s.pump_automatic:
        label = "⏹  Turn OFF" if s.pump_on else "▶  Turn ON"
        if st.button(label, use_container_width=True):
            sim.toggle_manual_pump()


s = sim.snapshot


# ─────────────────────────────────────────────────────────────────────────────
# MAIN: HEADER & KPI METRICS
# ─────────────────────────────────────────────────────────────────────────────
icon = "☀️" if s.irradiance > 0 else "🌙"
st.title(f"{icon} Solar Thermal Loop · {s.formatted_time}")

m1, m2, m3, m4, m5, m6 = st.columns(6)
m1.metric("Irradiance",   f"{s.irradiance:.0f} W/m²")
m2.metric("Ambient",      f"{s.ambient_temp:.1f} °C")
m3.metric("Collector",    f"{s.collector_temp:.1f} °C")
m4.metric("Tank Top",     f"{s.tank_top_temp:.1f} °C",
          delta=f"{s.tank_top_temp - s.tank_bottom_temp:.1f} °C over bottom")
m5.metric("Tank Average", f"{s.tank_average_temp:.1f} °C")
m6.metric("Energy Collected", f"{s.energy_collected_kwh:.2f} kWh")

pump_txt = "ON" if s.pump_on else "OFF"
mode_txt = "automatic" if s.pump_automatic else "manual"
st.markdown(
    f"**Pump:** <span style='color:{C['pump_on'] if s.pump_on else C['pump_off']}'>"
    f"● {pump_txt}</span> ({mode_txt})",
    unsafe_allow_html=True,
)

st.markdown("---")


# ─────────────────────────────────────────────────────────────────────────────
# CHARTS
# ─────────────────────────────────────────────────────────────────────────────
col_l, col_r = st.columns([3, 1])

with col_l:
    hist = s.history
    t    = np.array([p.time_hours for p in hist])

    fig = make_subplots(
        rows=2, cols=1,
        shared_xaxes=True,
        row_heights=[0.7, 0.3],
        vertical_spacing=0.04,
    )

    traces = [
        ("Collector",   "collector_temp",   C["collector"],   5),
        ("Tank Top",    "tank_top_temp",    C["tank_top"],    5),
        ("Tank Bottom", "tank_bottom_temp", C["tank_bottom"], 4),
        ("Ambient",     "ambient_temp",     C["outdoor"],     4),
    ]
    for label, attr, clr, size in traces:
        fig.add_trace(go.Scatter(
            x=t, y=[getattr(p, attr) for p in hist], name=label,
            mode="markers", marker=dict(color=clr, size=size),
            hovertemplate=f"{label}: %{{y:.1f}} °C<extra></extra>",
        ), row=1, col=1)

    fig.add_trace(go.Scatter(
        x=t, y=[p.irradiance for p in hist], name="Irradiance",
        mode="markers", marker=dict(color=C["irr_line"], size=4),
        hovertemplate="%{y:.0f} W/m²<extra></extra>",
    ), row=2, col=1)

    fig.update_yaxes(title_text="Temperature (°C)", row=1, col=1)
    fig.update_yaxes(title_text="W/m²", row=2, col=1)
    fig.update_xaxes(title_text="Time of day (h)", range=[0, 24], row=2, col=1)
    fig.update_layout(template=TEMPLATE, height=520, margin=dict(t=20, b=40),
                      legend=dict(orientation="h", y=1.05))
    st.plotly_chart(fig, use_container_width=True)

with col_r:
    layers = list(s.tank_layer_temps)
    fig_tank = go.Figure(go.Heatmap(
        z=[[T] for T in layers],
        y=[f"L{i}" for i in range(len(layers))],
        colorscale="RdBu_r",
        zmin=min(layers + [s.ambient_temp]),
        zmax=max(layers) + 1.0,
        text=[[f"{T:.1f} °C"] for T in layers],
        texttemplate="%{text}",
        showscale=False,
    ))
    fig_tank.update_xaxes(showticklabels=False)
    fig_tank.update_layout(template=TEMPLATE, height=520, margin=dict(t=20, b=40),
                           title="Tank layers (bottom → top)")
    st.plotly_chart(fig_tank, use_container_width=True)


# ─────────────────────────────────────────────────────────────────────────────
# LIVE REFRESH
# ─────────────────────────────────────────────────────────────────────────────
if s.is_running:
    time.sleep(REFRESH_S)
    st.rerun()
