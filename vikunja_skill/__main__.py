from vikunja_skill.cli import main

main()
