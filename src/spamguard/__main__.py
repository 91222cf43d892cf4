from spamguard.app import main

main()
