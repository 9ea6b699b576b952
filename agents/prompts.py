UNDERSTANDING_PROMPT_AR = """أنت خبير في فهم وتحليل المحتوى العلمي والأكاديمي. مهمتك قراءة وفهم النص التالي بعمق شديد:

النص المراد فهمه:
"{content}"
{file_info}
المطلوب منك فهم عميق يشمل:
1. الفهم الأساسي: الموضوع الرئيسي، الأفكار الأساسية، المفاهيم المهمة
2. التحليل العلمي: النظريات أو القوانين المذكورة، العمليات أو الخطوات، العلاقات بين المفاهيم
3. التطبيقات والأمثلة المذكورة في النص
4. النقاط المهمة للاختبار: المفاهيم والعلاقات والتطبيقات التي يجب أن يتقنها الطالب

تنسيق الإجابة (JSON فقط):
{{
  "summary": "ملخص شامل للمحتوى في 3-4 جمل",
  "mainTopic": "الموضوع الرئيسي",
  "keyPoints": ["النقطة الأولى المهمة", "النقطة الثانية المهمة"],
  "concepts": [
    {{"name": "اسم المفهوم", "definition": "تعريف المفهوم", "importance": "high/medium/low"}}
  ],
  "testablePoints": [
    {{"point": "النقطة القابلة للاختبار", "type": "understanding/application/analysis", "difficulty": "easy/medium/hard"}}
  ],
  "detectedLanguage": "{detected_language}",
  "complexity": "beginner/intermediate/advanced"
}}

تعليمات مهمة:
- استخرج المعلومات الدقيقة من النص نفسه ولا تضف معلومات من خارجه
- يجب أن تكون إجابتك JSON صحيح فقط"""


UNDERSTANDING_PROMPT_EN = """You are an expert in understanding and analyzing scientific and academic content. Read and deeply understand the following text:

TEXT TO UNDERSTAND:
"{content}"
{file_info}
REQUIRED UNDERSTANDING:
1. Basic understanding: main topic, key ideas, important concepts
2. Scientific analysis: theories or laws mentioned, processes or steps, relationships between concepts
3. Applications and examples mentioned in the text
4. Points for testing: concepts, relationships and applications students should master

OUTPUT ONLY VALID JSON:
{{
  "summary": "Comprehensive summary of the content in 3-4 sentences",
  "mainTopic": "Main topic",
  "keyPoints": ["First important point", "Second important point"],
  "concepts": [
    {{"name": "Concept name", "definition": "Concept definition", "importance": "high/medium/low"}}
  ],
  "testablePoints": [
    {{"point": "Testable point", "type": "understanding/application/analysis", "difficulty": "easy/medium/hard"}}
  ],
  "detectedLanguage": "{detected_language}",
  "complexity": "beginner/intermediate/advanced"
}}

IMPORTANT:
- Extract precise information from the text itself; do not add outside information
- Your response must be valid JSON only"""


FILE_INFO_AR = """
معلومات الملف:
- عدد الكلمات: {word_count}
- عدد الجمل: {sentence_count}
- عدد الفقرات: {paragraph_count}
- مستوى التعقيد: {complexity}
- العناوين: {headings} | القوائم: {lists} | الجداول: {tables}
"""


FILE_INFO_EN = """
FILE INFORMATION:
- Words: {word_count}
- Sentences: {sentence_count}
- Paragraphs: {paragraph_count}
- Complexity: {complexity}
- Headings: {headings} | Lists: {lists} | Tables: {tables}
"""


QUESTIONS_PROMPT_AR = """أنت خبير تعليمي ينشئ أسئلة ذكية بناءً على الفهم العميق للمحتوى.

فهم المحتوى:
- الموضوع الرئيسي: {main_topic}
- الملخص: {summary}
- النقاط الرئيسية: {key_points}
- المفاهيم: {concepts}
- النقاط القابلة للاختبار: {testable_points}
- مستوى التعقيد: {complexity}

أنشئ {question_count} سؤال ذكي بمستوى صعوبة {difficulty}:
1. اختبر الفهم العميق: المفاهيم والعلاقات والتطبيقات
2. الأسئلة يجب أن تكون بالعربية
3. لا أسئلة عن المؤلف أو التاريخ أو معلومات عامة
4. أنواع الأسئلة المسموحة: {question_types}
5. سؤال الاختيار من متعدد له 4 خيارات بالضبط، والسؤال المفتوح بدون خيارات و"correctAnswer": null

تنسيق الإجابة (JSON فقط):
{{
  "questions": [
    {{
      "questionText": "سؤال ذكي بناءً على الفهم",
      "questionType": "multiple_choice",
      "options": ["الإجابة الصحيحة", "خيار خطأ منطقي", "خيار خطأ منطقي آخر", "خيار خطأ منطقي ثالث"],
      "correctAnswer": 0,
      "explanation": "لماذا هذه الإجابة صحيحة بناءً على المحتوى",
      "difficulty": "{difficulty}",
      "category": "المفهوم المختبر",
      "cognitiveLevel": "knowledge/comprehension/application/analysis/synthesis/evaluation",
      "basedOnConcept": "المفهوم الذي يختبره السؤال"
    }}
  ]
}}

يجب أن تكون إجابتك JSON صحيح فقط."""


QUESTIONS_PROMPT_EN = """You are an expert educator who creates intelligent questions based on deep content understanding.

CONTENT UNDERSTANDING:
- Main topic: {main_topic}
- Summary: {summary}
- Key points: {key_points}
- Concepts: {concepts}
- Testable points: {testable_points}
- Complexity: {complexity}

Create {question_count} intelligent questions with {difficulty} difficulty:
1. Test deep understanding: concepts, relationships and applications
2. Questions must be in English
3. No questions about the author, publication date or outside information
4. Allowed question types: {question_types}
5. A multiple_choice question has exactly 4 options; an open_ended question has no options and "correctAnswer": null

OUTPUT ONLY VALID JSON:
{{
  "questions": [
    {{
      "questionText": "Intelligent question based on the understanding",
      "questionType": "multiple_choice",
      "options": ["Correct answer", "Logical wrong option", "Another logical wrong option", "Third logical wrong option"],
      "correctAnswer": 0,
      "explanation": "Why this answer is correct based on the content",
      "difficulty": "{difficulty}",
      "category": "Concept being tested",
      "cognitiveLevel": "knowledge/comprehension/application/analysis/synthesis/evaluation",
      "basedOnConcept": "Which concept this question tests"
    }}
  ]
}}

Return ONLY the JSON."""


DIFFICULTY_LABELS = {
    "ar": {"easy": "مبتدئ", "medium": "متوسط", "hard": "متقدم", "mixed": "متنوع (مزيج من جميع المستويات)"},
    "en": {"easy": "easy", "medium": "medium", "hard": "hard", "mixed": "mixed (a blend of all levels)"},
}


PROMPT_TEMPLATES = {
    ("understanding", "ar"): UNDERSTANDING_PROMPT_AR,
    ("understanding", "en"): UNDERSTANDING_PROMPT_EN,
    ("file_info", "ar"): FILE_INFO_AR,
    ("file_info", "en"): FILE_INFO_EN,
    ("questions", "ar"): QUESTIONS_PROMPT_AR,
    ("questions", "en"): QUESTIONS_PROMPT_EN,
}


def render_prompt(task: str, language: str, /, **fields) -> str:
    """Fill the template for (task, language); unknown languages use the Arabic template."""
    template = PROMPT_TEMPLATES.get((task, language)) or PROMPT_TEMPLATES[(task, "ar")]
    return template.format(**fields)
