"""
Flow Builder Form

Browser form for composing a flow: state model, submission client and the
Streamlit page that renders them.
"""
