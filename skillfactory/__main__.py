from skillfactory.cli import main

main()
