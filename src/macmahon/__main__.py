from macmahon import main

main()
