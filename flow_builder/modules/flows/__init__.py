"""
Klaviyo Flows Module

Turns a form-built flow (trigger + ordered email steps) into a Klaviyo flow:
- Server-side normalization and validation of the submitted steps
- Translation into Klaviyo's flow-definition graph
- One create-flow call to the Klaviyo API, result relayed to the form
"""
