"""
Klaviyo Email Sequence Builder - Streamlit Form

Run with:
    streamlit run flow_builder/ui/streamlit_app.py

The API server (uvicorn flow_builder.main:app) must be reachable at FLOW_API_URL.
"""

import streamlit as st

from flow_builder.shared.core.config import settings
from flow_builder.shared.core.constants import TRIGGER_TYPES, STEP_STATUSES, DELAY_UNITS
from flow_builder.ui.form_state import FlowFormState, StepForm
from flow_builder.ui.api_client import submit_flow

# Page config
st.set_page_config(
    page_title="Klaviyo Email Sequence Builder",
    page_icon="✉️",
    layout="wide"
)

# Initialize session state
if "flow_form" not in st.session_state:
    st.session_state.flow_form = FlowFormState()
    st.session_state.form_error = None
    st.session_state.submission = None

form: FlowFormState = st.session_state.flow_form


def text_field(column, step: StepForm, field_name: str, label: str, **kwargs) -> None:
    value = column.text_input(
        label,
        value=getattr(step, field_name),
        key=f"{field_name}_{step.id}",
        **kwargs
    )
    form.update_step(step.id, field_name, value)


def render_tracking(step: StepForm) -> None:
    for row in list(step.tracking_rows):
        param_col, value_col, remove_col = st.columns([2, 2, 1])
        param = param_col.text_input("Parameter", value=row.param, placeholder="utm_medium", key=f"param_{row.id}")
        value = value_col.text_input("Value", value=row.value, placeholder="email", key=f"value_{row.id}")
        form.update_tracking_row(step.id, row.id, "param", param)
        form.update_tracking_row(step.id, row.id, "value", value)
        if remove_col.button("Remove", key=f"remove_{row.id}"):
            form.remove_tracking_row(step.id, row.id)
            st.rerun()

    if st.button("Add parameter", key=f"add_param_{step.id}"):
        form.add_tracking_row(step.id)
        st.rerun()


def render_step(step: StepForm, position: int) -> None:
    with st.container(border=True):
        header_col, remove_col = st.columns([5, 1])
        header_col.markdown(f"**Step {position}**")
        if remove_col.button("Remove step", key=f"remove_{step.id}", disabled=len(form.steps) <= 1):
            form.remove_step(step.id)
            st.rerun()

        left, right = st.columns(2)
        text_field(left, step, "internal_name", "Internal name", placeholder=f"Email #{position}")
        text_field(right, step, "template_id", "Template ID")
        text_field(left, step, "subject_line", "Subject line")
        text_field(right, step, "preview_text", "Preview text")
        text_field(left, step, "from_name", "From name")
        text_field(right, step, "from_email", "From email")
        text_field(left, step, "reply_to_email", "Reply-to email", placeholder="Defaults to from email")
        text_field(right, step, "cc_email", "CC email")
        text_field(left, step, "bcc_email", "BCC email")

        status = right.selectbox(
            "Status",
            STEP_STATUSES,
            index=STEP_STATUSES.index(step.status),
            key=f"status_{step.id}"
        )
        form.update_step(step.id, "status", status)

        smart_sending = st.checkbox(
            "Smart sending",
            value=step.smart_sending_enabled,
            key=f"smart_sending_{step.id}"
        )
        form.update_step(step.id, "smart_sending_enabled", smart_sending)

        # Delay
        delay_enabled = st.checkbox(
            "Wait before sending this email",
            value=step.delay_enabled,
            key=f"delay_enabled_{step.id}"
        )
        if delay_enabled != step.delay_enabled:
            form.set_delay_enabled(step.id, delay_enabled)

        if step.delay_enabled:
            value_col, unit_col, tz_col = st.columns(3)
            delay_value = value_col.number_input(
                "Value",
                min_value=0,
                step=1,
                value=int(step.delay_value or 0),
                key=f"delay_value_{step.id}"
            )
            delay_unit = unit_col.selectbox(
                "Unit",
                DELAY_UNITS,
                index=DELAY_UNITS.index(step.delay_unit),
                key=f"delay_unit_{step.id}"
            )
            delay_timezone = tz_col.text_input(
                "Timezone",
                value=step.delay_timezone,
                key=f"delay_timezone_{step.id}"
            )
            form.update_step(step.id, "delay_value", delay_value)
            form.update_step(step.id, "delay_unit", delay_unit)
            form.update_step(step.id, "delay_timezone", delay_timezone)

        # Tracking parameters
        tracking_enabled = st.checkbox(
            "Add custom tracking parameters",
            value=step.add_tracking_params,
            key=f"tracking_enabled_{step.id}"
        )
        if tracking_enabled != step.add_tracking_params:
            form.set_tracking_enabled(step.id, tracking_enabled)
            st.rerun()

        if step.add_tracking_params:
            render_tracking(step)


main_col, side_col = st.columns([2, 1])

with main_col:
    st.title("Klaviyo Email Sequence Builder")
    st.markdown(
        "Configure a flow, add email steps, and submit to create the sequence "
        "inside your Klaviyo account via the official API."
    )

    st.subheader("Flow Settings")
    name_col, type_col, id_col = st.columns(3)
    form.flow_name = name_col.text_input("Flow name", value=form.flow_name, placeholder="Welcome series", key="flow_name")
    form.trigger_type = type_col.selectbox(
        "Trigger type",
        TRIGGER_TYPES,
        index=TRIGGER_TYPES.index(form.trigger_type),
        key="trigger_type"
    )
    form.trigger_id = id_col.text_input("Trigger ID", value=form.trigger_id, placeholder="List or segment ID", key="trigger_id")

    st.subheader("Email Steps")
    for position, step in enumerate(list(form.steps), start=1):
        render_step(step, position)

    if st.button("Add email step"):
        form.add_step()
        st.rerun()

    if st.session_state.form_error:
        st.error(st.session_state.form_error)

    if st.button("Create Klaviyo flow", type="primary"):
        st.session_state.submission = None
        st.session_state.form_error = form.validate()

        if not st.session_state.form_error:
            with st.spinner("Creating flow..."):
                result = submit_flow(form.to_payload(), api_url=settings.FLOW_API_URL)
            st.session_state.submission = result
            if not result.ok:
                st.session_state.form_error = result.error
        st.rerun()

with side_col:
    st.subheader("Deployment checklist")
    st.markdown(
        "1. Set the `KLAVIYO_API_KEY` environment variable on the API server.\n"
        "2. Confirm trigger IDs (list or segment) exist in Klaviyo.\n"
        "3. After creation, adjust templates and creatives in Klaviyo."
    )

    st.subheader("API response")
    submission = st.session_state.submission
    if submission is not None and submission.has_summary:
        st.success(f"Flow **{submission.flow_name}** created.")
        st.markdown(f"Flow ID: `{submission.flow_id}`")
    else:
        st.caption("Submit the form to see Klaviyo API responses.")

    if submission is not None and submission.details_text:
        st.code(submission.details_text, language="json")
