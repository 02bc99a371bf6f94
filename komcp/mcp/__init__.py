"""MCP tool specifications, argument parsing, result building and tool registration."""