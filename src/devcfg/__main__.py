from devcfg.devcfg import main

main()
