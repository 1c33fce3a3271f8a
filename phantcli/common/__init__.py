"""Wire vocabulary shared by the engine and the client."""
