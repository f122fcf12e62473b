"""Ports (interfaces) for IAM bounded context.

Ports define the contracts for repositories and collaborators without
specifying implementation details. This allows for dependency inversion
and makes the domain layer independent of infrastructure.

Import from the submodules directly: ``iam.ports.exceptions`` is used by
the domain layer, so this package must not import the repository ports.
"""
