from bosun import cli


app = cli("shipyard", version="0.1.0").verbose().quiet().dry_run().help()
app.example("shipyard deploy prod --force")


async def timing(context):
    if context.dry_run:
        print("dry run: %s skipped" % context.command.name)
        return None
    return await context.next()


(app.command("deploy <target> [...services]", "deploy services to a target")
    .option("-f, --force", "skip confirmation")
    .option("-r, --region <region>", "target region", default="eu-west-1")
    .alias("d")
    .use(timing)
    .action(lambda target, services, options: print("deploying", target, services or "everything", options["region"])))

app.command("db", "database maintenance")
app.command("db:migrate [step]", "apply migrations").action(lambda step, options: print("migrating", step or "all"))
app.command("db:seed", "load fixtures").action(lambda options: print("seeding"))


if __name__ == '__main__':
    raise SystemExit(app.run())
