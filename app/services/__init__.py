"""
Service Organization
====================
Services are organized by their role:

**ai/**
  Stateless analysis of engine inputs: the photo quality gate and the
  layered AI response parser.

**application/**
  Services managed by ServiceContainer, one instance per application:
  analysis ingestion, care schedule reconciliation, reminders and the
  background rescanner.
"""
