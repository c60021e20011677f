from sortify.cli import main

main()
