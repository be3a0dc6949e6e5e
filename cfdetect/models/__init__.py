"""cfdetect models package.

Defines the request-scoped data contracts shared by the inference pipeline:

  - report.py    — ProbeResult, InferenceReport
  - responses.py — PrettyJSONResponse and the /detect success response builder
"""
