from figtell.cli import main

main()
