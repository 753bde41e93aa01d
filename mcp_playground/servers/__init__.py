# FastMCP demo servers for the interactive client
