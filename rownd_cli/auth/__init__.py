# Package: rownd_cli.auth
