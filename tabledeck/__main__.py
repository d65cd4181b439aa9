from tabledeck.cli import main

main()
