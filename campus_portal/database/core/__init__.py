"""Service functions called by the HTTP routers (`funcs`) and the seed / backup operations (`backup`)."""
