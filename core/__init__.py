"""core/ -- Kernel package for the credential core: configuration only.

Layer rule: core/ imports only stdlib + third-party libraries.
credentials/ imports from core/, never the other way around.
"""
