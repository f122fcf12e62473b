"""Shared Kernel module.

This module contains foundational components that are explicitly shared across
multiple bounded contexts: the role/action vocabulary and policy, the audit
port, the identity error root, in-process events and the TTL cache. Changes
to this module affect multiple contexts and should be carefully coordinated.
"""
