from habitwire_skill.cli import main

main()
