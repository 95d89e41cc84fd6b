from exifposter.cli import main

main()
