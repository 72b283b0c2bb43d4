from iris_cli.mcp_server import main

main()
