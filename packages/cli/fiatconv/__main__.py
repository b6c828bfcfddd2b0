from fiatconv.cli import main

main()
