from bloomscope.cli import main

main()
