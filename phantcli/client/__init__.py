"""Terminal client: asyncio transport, blessed UI, cookie storage."""
