"""Runtime handlers wired in by the plan.

These run at apply time, not plan time: the host key custom resource handler
(imports a host key from Secrets Manager into the transfer server) and the
archive subscriber (copies uploaded objects into the archive bucket).
"""
