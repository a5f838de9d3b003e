from django.core.management.base import BaseCommand

from resume_processor.services.embedding_pipeline import EmbeddingPipeline
from resume_processor.services.openai_service import OpenAIService
from resume_processor.services.scheduler import CeleryScheduler, real_time_scheduler


class Command(BaseCommand):
    help = "Reschedule embedding for every resume whose chunking did not complete."

    def add_arguments(self, parser):
        parser.add_argument(
            '--drain',
            action='store_true',
            help="Run the steps in this process, waiting out the delays, until every resume is complete.",
        )

    def handle(self, *args, **options):
        scheduler = real_time_scheduler() if options['drain'] else CeleryScheduler()
        pipeline = EmbeddingPipeline(OpenAIService(), scheduler)

        count = pipeline.recover()
        self.stdout.write(f"Rescheduled {count} unfinished resume(s)")

        if options['drain']:
            steps = scheduler.run(pipeline.step)
            self.stdout.write(self.style.SUCCESS(f"Ran {steps} pipeline step(s)"))
