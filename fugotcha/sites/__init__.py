"""Site schemas: the fixed field layouts of supported page templates."""
