from apz.cli import main

main()
