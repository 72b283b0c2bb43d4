from iris_cli.cli import main

main()
